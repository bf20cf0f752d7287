"""
In-memory mirror of the persistence API.

The mirror owns one collection per entity kind plus the V/TO document. It
applies a change only after the server confirms it; a failed call leaves
every collection as it was and queues an error notification instead. The
team roster is never stored: it is projected from the people collection
whenever it is read.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from eosdash.core.convert import empty_vision, from_remote, to_remote, vision_shape_problem
from eosdash.core.entities.kinds import (
    COLLECTION_KINDS,
    VISION_KIND,
    VISION_PATH,
    EntityKind,
)
from eosdash.core.entities.models import (
    MODEL_BY_KIND,
    CoreValue,
    EntityModel,
    RosterEntry,
    Severity,
    VisionDocument,
)
from eosdash.core.exceptions import UnknownKindError
from eosdash.core.mirror.models import (
    LoadReport,
    MirrorSnapshot,
    MutationResult,
    project_roster,
)
from eosdash.core.notifications import NotificationQueue
from eosdash.core.remote import ApiResult, ConnectionStatus, RemoteClient
from eosdash.core.validation import validate

logger = logging.getLogger(__name__)


class EntityMirror:
    """
    Local mirror of every entity collection.

    Mutations are not serialized against each other: when two calls on the
    same kind overlap, each applies its local change when its own response
    arrives, so the last one to complete wins.

    Example:
        >>> async with RemoteClient("https://api.example.com/api/v1") as client:
        ...     mirror = EntityMirror(client)
        ...     await mirror.load_all()
        ...     result = await mirror.create("person", {"name": "Ann", "role": "Ops",
        ...                                             "seat": "Operations"})
        ...     [entry.name for entry in mirror.roster]
        ['Ann']
    """

    def __init__(
        self,
        client: RemoteClient,
        notifications: NotificationQueue | None = None,
    ) -> None:
        """
        Initialize an empty mirror.

        Args:
            client: Remote client used for every API call
            notifications: Queue receiving user-facing messages
        """
        self._client = client
        self.notifications = notifications if notifications is not None else NotificationQueue()
        self._collections: dict[EntityKind, tuple[EntityModel, ...]] = {
            kind: () for kind in COLLECTION_KINDS
        }
        self._vision = VisionDocument()
        self._sync_tasks: set[asyncio.Task[bool]] = set()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def client(self) -> RemoteClient:
        return self._client

    @property
    def status(self) -> ConnectionStatus:
        """Connectivity status reported by the remote client."""
        return self._client.status

    @property
    def busy(self) -> bool:
        """True while any API call is outstanding."""
        return self._client.busy

    @property
    def vision(self) -> VisionDocument:
        return self._vision

    @property
    def roster(self) -> tuple[RosterEntry, ...]:
        """``{id, name}`` for every person, recomputed on each read."""
        return project_roster(self._collections[EntityKind.PERSON])  # type: ignore[arg-type]

    def get(self, kind: str | EntityKind) -> tuple[EntityModel, ...]:
        """All entities of ``kind`` in insertion order."""
        return self._items(self._resolve(kind))

    def find(self, kind: str | EntityKind, entity_id: str) -> EntityModel | None:
        """The entity of ``kind`` with ``entity_id``, or None."""
        for item in self.get(kind):
            if item.id == entity_id:
                return item
        return None

    def snapshot(self) -> MirrorSnapshot:
        """Immutable copy of every collection for the views."""
        c = self._collections
        return MirrorSnapshot(
            metrics=c[EntityKind.METRIC],
            rocks=c[EntityKind.ROCK],
            issues=c[EntityKind.ISSUE],
            people=c[EntityKind.PERSON],
            todos=c[EntityKind.TODO],
            meetings=c[EntityKind.MEETING],
            vision=self._vision,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, kind: str | EntityKind, data: Mapping[str, Any]) -> MutationResult:
        """
        Validate, submit and, once confirmed, append a new entity.

        Args:
            kind: Entity kind
            data: Local record as submitted by the form

        Returns:
            MutationResult; ``errors`` is set when validation failed and no
            remote call was made

        Raises:
            UnknownKindError: If ``kind`` is not a managed kind
        """
        entity_kind = self._resolve(kind)

        check = validate(entity_kind, data)
        if not check.valid:
            logger.debug("Not creating %s: missing %s", entity_kind.value, sorted(check.errors))
            return MutationResult(success=False, errors=check.errors)

        remote_record = to_remote(entity_kind, data)
        field_errors = self._field_errors(entity_kind, remote_record)
        if field_errors:
            logger.debug("Not creating %s: invalid %s", entity_kind.value, sorted(field_errors))
            return MutationResult(success=False, errors=field_errors)

        result = await self._client.call(entity_kind.collection_path, "POST", remote_record)
        if not result.success:
            return self._failed(f"Failed to create {entity_kind.value}", result)

        entity = self._confirmed(entity_kind, remote_record, result)
        if entity is None:
            return self._rejected_echo(f"Failed to create {entity_kind.value}", entity_kind.value)
        self._set_items(entity_kind, (*self._items(entity_kind), entity))
        self.notifications.push(f"{entity_kind.value} created successfully!", Severity.SUCCESS)

        record = entity.to_record()
        self._start_sync(entity_kind.value, record)
        return MutationResult(success=True, entity=record, clear_form=True)

    async def update(
        self,
        kind: str | EntityKind,
        entity_id: str,
        data: Mapping[str, Any],
    ) -> MutationResult:
        """
        Submit changes to an existing entity and, once confirmed, replace it in place.

        The submitted fields are laid over the mirrored record, so a partial
        edit keeps the rest of the entity (including its creation time). No
        required-field check is made here, but values the entity model rejects
        are returned as ``errors`` without a remote call.

        Args:
            kind: Entity kind
            entity_id: Id of the entity to update
            data: Changed fields as a local record

        Returns:
            MutationResult

        Raises:
            UnknownKindError: If ``kind`` is not a managed kind
        """
        entity_kind = self._resolve(kind)

        existing = self.find(entity_kind, entity_id)
        # An entity that is not mirrored has no known createdAt, so it is stamped now
        base = existing.to_record() if existing is not None else {}
        remote_record = to_remote(entity_kind, {**base, **data, "id": entity_id})
        field_errors = self._field_errors(entity_kind, remote_record)
        if field_errors:
            logger.debug("Not updating %s: invalid %s", entity_kind.value, sorted(field_errors))
            return MutationResult(success=False, errors=field_errors)

        result = await self._client.call(entity_kind.item_path(entity_id), "PUT", remote_record)
        if not result.success:
            return self._failed(f"Failed to update {entity_kind.value}", result)

        entity = self._confirmed(entity_kind, remote_record, result)
        if entity is None:
            return self._rejected_echo(f"Failed to update {entity_kind.value}", entity_kind.value)
        items = self._items(entity_kind)
        if any(item.id == entity_id for item in items):
            self._set_items(
                entity_kind,
                tuple(entity if item.id == entity_id else item for item in items),
            )
        else:
            logger.info("Updated %s %s is not mirrored locally", entity_kind.value, entity_id)
        self.notifications.push(f"{entity_kind.value} updated successfully!", Severity.SUCCESS)
        return MutationResult(success=True, entity=entity.to_record(), clear_form=True)

    async def delete(self, kind: str | EntityKind, entity_id: str) -> MutationResult:
        """
        Delete an entity and, once confirmed, drop it from the mirror.

        Raises:
            UnknownKindError: If ``kind`` is not a managed kind
        """
        entity_kind = self._resolve(kind)

        result = await self._client.call(entity_kind.item_path(entity_id), "DELETE")
        if not result.success:
            return self._failed(f"Failed to delete {entity_kind.value}", result)

        self._set_items(
            entity_kind,
            tuple(item for item in self._items(entity_kind) if item.id != entity_id),
        )
        self.notifications.push(f"{entity_kind.value} deleted successfully!", Severity.SUCCESS)
        return MutationResult(success=True)

    async def update_vision(self, data: Mapping[str, Any]) -> MutationResult:
        """
        Save the V/TO and, once confirmed, replace the mirrored document.

        Args:
            data: Changed V/TO fields as a local record

        Returns:
            MutationResult with the saved document as ``entity``
        """
        local = {**self._vision.to_record(), **data}
        problem = vision_shape_problem(local)
        if problem is None and self._parse_vision(local) is None:
            problem = "V/TO fields have invalid values"
        if problem is not None:
            return MutationResult(success=False, errors={VISION_KIND: problem})

        remote_record = to_remote(VISION_KIND, local)
        result = await self._client.call(VISION_PATH, "PUT", remote_record)
        if not result.success:
            return self._failed("Failed to save V/TO", result)

        confirmed = (
            {**remote_record, **result.data} if isinstance(result.data, dict) else remote_record
        )
        vision = None if vision_shape_problem(confirmed) else self._parse_vision(confirmed)
        if vision is None:
            return self._rejected_echo("Failed to save V/TO", VISION_KIND)
        self._vision = vision
        self.notifications.push("V/TO saved successfully!", Severity.SUCCESS)
        return MutationResult(success=True, entity=self._vision.to_record())

    # ------------------------------------------------------------------
    # Bulk load
    # ------------------------------------------------------------------

    async def load_all(self) -> LoadReport:
        """
        Fetch every collection and the V/TO concurrently.

        Each collection is replaced as soon as its own fetch succeeds; a
        failed fetch leaves that collection as it was. Any failure produces a
        single "Failed to load data" notification and an ``error`` status.

        Returns:
            LoadReport naming the kinds that loaded and the kinds that failed
        """
        report = LoadReport()

        async def load_collection(kind: EntityKind) -> None:
            result = await self._client.call(kind.collection_path)
            if not result.success:
                report.failed[kind.value] = result.error or "Unknown error"
                return
            records = result.data if result.data is not None else []
            if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
                report.failed[kind.value] = "Expected a list of records"
                return
            try:
                items = tuple(self._to_model(kind, from_remote(kind, r)) for r in records)
            except ValidationError as e:
                logger.warning("Discarding %s load: %s", kind.value, e)
                report.failed[kind.value] = f"Invalid {kind.value} record: {e.error_count()} errors"
                return
            self._collections[kind] = items
            report.loaded.append(kind.value)

        async def load_vision() -> None:
            result = await self._client.call(VISION_PATH)
            if not result.success:
                report.failed[VISION_KIND] = result.error or "Unknown error"
                return
            if result.data is not None and not isinstance(result.data, dict):
                report.failed[VISION_KIND] = "Expected a V/TO document"
                return
            problem = vision_shape_problem(result.data) if result.data is not None else None
            if problem is not None:
                logger.warning("Discarding V/TO load: %s", problem)
                report.failed[VISION_KIND] = f"Invalid V/TO: {problem}"
                return
            try:
                vision = VisionDocument.model_validate(
                    from_remote(VISION_KIND, result.data) or empty_vision()
                )
            except ValidationError as e:
                logger.warning("Discarding V/TO load: %s", e)
                report.failed[VISION_KIND] = f"Invalid V/TO: {e.error_count()} errors"
                return
            self._vision = vision
            report.loaded.append(VISION_KIND)

        await asyncio.gather(*(load_collection(k) for k in COLLECTION_KINDS), load_vision())

        if report.failed:
            logger.warning("Initial load incomplete; failed: %s", report.failed)
            self._client.set_status(ConnectionStatus.ERROR)
            self.notifications.push("Failed to load data", Severity.ERROR)
        else:
            logger.info("Loaded %d collections", len(report.loaded))
            self._client.set_status(ConnectionStatus.CONNECTED)
        return report

    # ------------------------------------------------------------------
    # CRM webhook
    # ------------------------------------------------------------------

    async def sync_all(self) -> bool:
        """Ask the CRM webhook for a full sync. Returns the webhook outcome."""
        return await self._sync("all", {})

    async def wait_for_sync(self) -> None:
        """Wait for every detached webhook sync started so far."""
        if self._sync_tasks:
            await asyncio.gather(*list(self._sync_tasks))

    def _start_sync(self, kind: str, payload: dict[str, Any]) -> None:
        if self._client.webhook_url is None:
            return
        task = asyncio.create_task(self._sync(kind, payload))
        self._sync_tasks.add(task)
        task.add_done_callback(self._sync_tasks.discard)

    async def _sync(self, kind: str, payload: dict[str, Any]) -> bool:
        ok = await self._client.notify(kind, payload)
        if ok:
            self.notifications.push("Synced with CRM successfully", Severity.SUCCESS)
        else:
            self.notifications.push("Failed to sync with CRM", Severity.ERROR)
        return ok

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, kind: str | EntityKind) -> EntityKind:
        entity_kind = EntityKind.parse(kind)
        if entity_kind is None:
            raise UnknownKindError(str(kind))
        return entity_kind

    def _items(self, kind: EntityKind) -> tuple[EntityModel, ...]:
        if kind is EntityKind.CORE_VALUE:
            return self._vision.core_values
        return self._collections[kind]

    def _set_items(self, kind: EntityKind, items: tuple[EntityModel, ...]) -> None:
        if kind is EntityKind.CORE_VALUE:
            core_values = tuple(item for item in items if isinstance(item, CoreValue))
            self._vision = self._vision.model_copy(update={"core_values": core_values})
        else:
            self._collections[kind] = items

    def _to_model(self, kind: EntityKind, record: Mapping[str, Any] | None) -> EntityModel:
        return MODEL_BY_KIND[kind].model_validate(record)

    def _field_errors(self, kind: EntityKind, remote_record: dict[str, Any]) -> dict[str, str]:
        """Field -> message for values the entity model rejects."""
        try:
            self._to_model(kind, from_remote(kind, remote_record))
        except ValidationError as e:
            return {
                ".".join(str(part) for part in error["loc"]) or kind.value: error["msg"]
                for error in e.errors()
            }
        return {}

    def _confirmed(
        self,
        kind: EntityKind,
        sent: dict[str, Any],
        result: ApiResult,
    ) -> EntityModel | None:
        # Server echo wins; fall back to what was sent for fields it omits
        confirmed = {**sent, **result.data} if isinstance(result.data, dict) else sent
        try:
            return self._to_model(kind, from_remote(kind, confirmed))
        except ValidationError as e:
            logger.warning("Server echo for %s is invalid: %s", kind.value, e)
            return None

    def _parse_vision(self, record: Mapping[str, Any]) -> VisionDocument | None:
        """The V/TO model for a well-shaped record in either spelling, or None if invalid."""
        try:
            return VisionDocument.model_validate(from_remote(VISION_KIND, record))
        except ValidationError as e:
            logger.warning("Invalid V/TO: %s", e)
            return None

    def _rejected_echo(self, message: str, label: str) -> MutationResult:
        error = f"Server returned an invalid {label}"
        logger.warning("%s: %s", message, error)
        self.notifications.push(message, Severity.ERROR)
        return MutationResult(success=False, error=error)

    def _failed(self, message: str, result: ApiResult) -> MutationResult:
        logger.warning("%s: %s", message, result.error)
        self.notifications.push(message, Severity.ERROR)
        return MutationResult(success=False, error=result.error)
