"""
Tests for layered .env loading.
"""

import os

from eosdash.core.config import load_layered_env


class TestLoadLayeredEnv:
    """Test user + project .env precedence."""

    def test_project_overrides_user(self, tmp_path, monkeypatch):
        user_env = tmp_path / "xdg" / "eosdash" / ".env"
        user_env.parent.mkdir(parents=True)
        user_env.write_text("EOSDASH_API_BASE=https://user.test\nEOSDASH_TIMEOUT=9\n")
        (tmp_path / ".env").write_text("EOSDASH_API_BASE=https://project.test\n")

        loaded = load_layered_env()

        assert loaded == {"EOSDASH_API_BASE", "EOSDASH_TIMEOUT"}
        assert os.environ["EOSDASH_API_BASE"] == "https://project.test"
        assert os.environ["EOSDASH_TIMEOUT"] == "9"

    def test_env_local_beats_env(self, tmp_path):
        (tmp_path / ".env").write_text("EOSDASH_WEBHOOK_URL=https://a.test\n")
        (tmp_path / ".env.local").write_text("EOSDASH_WEBHOOK_URL=https://b.test\n")

        load_layered_env()

        assert os.environ["EOSDASH_WEBHOOK_URL"] == "https://b.test"

    def test_shell_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EOSDASH_API_BASE", "https://shell.test")
        (tmp_path / ".env").write_text("EOSDASH_API_BASE=https://project.test\n")

        loaded = load_layered_env()

        assert loaded == set()
        assert os.environ["EOSDASH_API_BASE"] == "https://shell.test"

    def test_no_files(self):
        assert load_layered_env() == set()

    def test_explicit_paths(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("EOSDASH_NOTIFICATION_TTL=3\n")

        loaded = load_layered_env(user_env_paths=[], project_env_paths=[env_file])

        assert loaded == {"EOSDASH_NOTIFICATION_TTL"}
        assert os.environ["EOSDASH_NOTIFICATION_TTL"] == "3"
