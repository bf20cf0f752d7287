"""Core sync layer: conversion, validation, remote access, mirror and views."""
