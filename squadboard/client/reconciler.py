# squadboard/client/reconciler.py
"""Optimistic task editing on top of the task API.

Local edits are written to the ``TaskRepository`` straight away; the matching
request then goes out and the server's answer replaces the cached copy. Errors
never escape commit or delete calls: they end up as ``Notification`` records
and the optimistic value stays on screen so the user can retry.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Union

from squadboard.client.api_client import TaskApiClient, TaskApiError, TaskNotFoundError
from squadboard.client.debounce import DebounceTimer
from squadboard.client.notifications import Notification
from squadboard.client.records import DRAFT_ID_PREFIX, TaskRecord, field_name, is_draft_id
from squadboard.client.repository import TaskRepository
from squadboard.presentation.view_engine import kanban_drop_status
from squadboard.vocabulary import DEFAULT_PRIORITY, DEFAULT_STATUS, DEFAULT_TYPE

logger = logging.getLogger("squadboard.reconciler")

AUTOSAVE_DELAY_SECONDS = 1.0
DEFAULT_ASSIGNEE_ID = "coach1"

EDITABLE_FIELDS = (
    "name",
    "description",
    "status",
    "priority",
    "type",
    "deadline",
    "assignee_id",
    "related_athlete_ids",
)
TEXT_FIELDS = ("name", "description")

TaskRef = Union[str, TaskRecord]
PromotionListener = Callable[[str, str], Any]

_MISSING = object()


def _local_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskReconciler:
    def __init__(
        self,
        api: TaskApiClient,
        repository: Optional[TaskRepository] = None,
        *,
        autosave_delay: float = AUTOSAVE_DELAY_SECONDS,
        fallback_assignee_id: Optional[str] = None,
        notify: Optional[Callable[[Notification], Any]] = None,
    ):
        self.api = api
        self.repository = repository if repository is not None else TaskRepository()
        self.autosave_delay = autosave_delay
        self.fallback_assignee_id = fallback_assignee_id
        self.notifications: list[Notification] = []
        self._notify = notify

        # last server-confirmed copy per task (the draft itself for drafts)
        self._committed: dict[str, TaskRecord] = {}
        # draft id -> server id after promotion
        self._aliases: dict[str, str] = {}
        self._timers: dict[tuple[str, str], DebounceTimer] = {}
        self._pending_text: dict[tuple[str, str], Any] = {}
        self._creating: dict[str, asyncio.Future] = {}
        self._promotion_listeners: list[PromotionListener] = []

    # -------------------------
    # Collection
    # -------------------------

    async def load(self) -> list[TaskRecord]:
        tasks = await self.api.list_tasks()

        if self.fallback_assignee_id is None:
            try:
                coaches = await self.api.list_coaches()
            except TaskApiError:
                logger.warning("coach_lookup_failed")
                coaches = []
            self.fallback_assignee_id = coaches[0].id if coaches else DEFAULT_ASSIGNEE_ID

        drafts = [task for task in self.repository.all() if task.is_draft]
        self._committed = {
            **{draft.id: self._committed.get(draft.id, draft) for draft in drafts},
            **{task.id: task for task in tasks},
        }
        self.repository.load([*drafts, *(self._overlay_pending(task) for task in tasks)])

        logger.info("tasks_loaded", extra={"task_count": len(tasks), "draft_count": len(drafts)})
        return self.repository.all()

    def resolve_id(self, task: TaskRef) -> str:
        task_id = task if isinstance(task, str) else task.id
        while task_id in self._aliases:
            task_id = self._aliases[task_id]
        return task_id

    def on_promoted(self, listener: PromotionListener) -> None:
        """Register ``listener(draft_id, server_id)``, called once a draft is persisted."""
        self._promotion_listeners.append(listener)

    # -------------------------
    # Drafts
    # -------------------------

    def create_draft(self, **fields) -> TaskRecord:
        now = _local_now()
        draft = TaskRecord.model_validate(
            {
                "name": "New Task",
                "description": "",
                "type": DEFAULT_TYPE,
                "status": DEFAULT_STATUS,
                "priority": DEFAULT_PRIORITY,
                "related_athlete_ids": [],
                "created_at": now,
                "updated_at": now,
                **fields,
                "id": f"{DRAFT_ID_PREFIX}{uuid.uuid4().hex}",
            }
        )
        self._committed[draft.id] = draft
        self.repository.prepend(draft)
        return draft

    # -------------------------
    # Field commits
    # -------------------------

    async def commit_field(self, task: TaskRef, field: str, value: Any) -> Optional[TaskRecord]:
        return await self.commit_fields(task, {field: value})

    async def commit_fields(self, task: TaskRef, changes: Mapping[str, Any]) -> Optional[TaskRecord]:
        """Apply ``changes`` locally and persist them.

        Returns the record now cached for the task, or ``None`` when the commit
        failed or the task is gone.
        """
        task_id = self.resolve_id(task)
        changes = self._editable(changes)

        if not is_draft_id(task_id):
            return await self._send_update(task_id, changes)

        draft = self.repository.get(task_id)
        if draft is None:
            logger.warning("commit_unknown_task", extra={"task_id": task_id})
            return None
        self.repository.replace(self._apply(draft, changes))

        creating = self._creating.get(task_id)
        if creating is not None:
            created = await asyncio.shield(creating)
            if created is None:
                return None
            return await self._send_update(created.id, changes)

        future = asyncio.ensure_future(self._create_from_draft(task_id))
        self._creating[task_id] = future
        try:
            return await asyncio.shield(future)
        finally:
            self._creating.pop(task_id, None)

    async def _send_update(self, task_id: str, changes: dict) -> Optional[TaskRecord]:
        current = self.repository.get(task_id)
        if current is None:
            logger.warning("commit_unknown_task", extra={"task_id": task_id})
            return None

        optimistic = self.repository.replace(self._apply(current, changes))
        payload = optimistic.model_dump(mode="json", by_alias=True, include=set(changes))

        try:
            server = await self.api.update_task(task_id, payload)
        except TaskNotFoundError:
            logger.info("task_vanished", extra={"task_id": task_id})
            self._forget(task_id)
            self._emit("warning", "Task no longer exists", "It was deleted elsewhere and has been removed.", task_id)
            return None
        except TaskApiError as exc:
            logger.warning(
                "task_update_failed",
                extra={"task_id": task_id, "fields": sorted(changes), "status_code": exc.status_code},
            )
            self._emit("error", "Failed to save task", self._describe(exc), task_id)
            return None

        return self._merge(server)

    async def _create_from_draft(self, draft_id: str) -> Optional[TaskRecord]:
        draft = self.repository.get(draft_id)
        if draft is None:
            return None

        payload = draft.model_dump(mode="json", by_alias=True, exclude={"id", "created_at", "updated_at"})
        # the store refuses tasks without an assignee
        payload["assigneeId"] = payload.get("assigneeId") or self.fallback_assignee_id or DEFAULT_ASSIGNEE_ID
        payload["creatorId"] = payload.get("creatorId") or payload["assigneeId"]

        try:
            created = await self.api.create_task(payload)
        except TaskApiError as exc:
            logger.warning("task_create_failed", extra={"draft_id": draft_id, "status_code": exc.status_code})
            self._emit("error", "Failed to create task", self._describe(exc), draft_id)
            return None

        self._aliases[draft_id] = created.id
        if draft_id not in self.repository:
            # discarded while the create was in flight
            logger.info("draft_discarded_after_create", extra={"draft_id": draft_id, "task_id": created.id})
            await self.delete_task(created.id)
            return None

        self._committed.pop(draft_id, None)
        self._committed[created.id] = created
        self._move_local_state(draft_id, created.id)
        merged = self.repository.rekey(draft_id, self._overlay_pending(created))

        logger.info("draft_promoted", extra={"draft_id": draft_id, "task_id": created.id})
        for listener in self._promotion_listeners:
            listener(draft_id, created.id)
        self._emit("success", "Task created", None, created.id)
        return merged

    async def on_drag_to_column(self, task: TaskRef, over_id: str) -> Optional[TaskRecord]:
        """Board drop onto a column key or another card: commit the new status."""
        task_id = self.resolve_id(task)
        status = kanban_drop_status(self.repository.all(), task_id, self.resolve_id(over_id))
        if status is None:
            return self.repository.get(task_id)
        return await self.commit_field(task_id, "status", status)

    # -------------------------
    # Free-text autosave
    # -------------------------

    def edit_text(self, task: TaskRef, field: str, value: Optional[str]) -> Optional[TaskRecord]:
        """Keystroke in a name/description editor: show it now, save after a quiet period."""
        task_id = self.resolve_id(task)
        field = self._text_field(field)
        current = self.repository.get(task_id)
        if current is None:
            return None

        key = (task_id, field)
        self._pending_text[key] = value
        updated = self.repository.replace(self._apply(current, {field: value}))

        timer = self._timers.setdefault(key, DebounceTimer())
        timer.schedule(lambda: self._flush_text(task_id, field), self.autosave_delay)
        return updated

    async def confirm_text(self, task: TaskRef, field: str) -> Optional[TaskRecord]:
        """Blur or enter: commit the pending text right away."""
        task_id = self.resolve_id(task)
        field = self._text_field(field)
        timer = self._timers.get((task_id, field))
        if timer is not None:
            timer.cancel()
        return await self._flush_text(task_id, field)

    def cancel_text(self, task: TaskRef, field: str) -> Optional[TaskRecord]:
        """Escape: drop the pending text and show the last committed value again."""
        task_id = self.resolve_id(task)
        field = self._text_field(field)
        timer = self._timers.get((task_id, field))
        if timer is not None:
            timer.cancel()
        self._pending_text.pop((task_id, field), None)

        current = self.repository.get(task_id)
        committed = self._committed.get(task_id)
        if current is None or committed is None:
            return current
        return self.repository.replace(self._apply(current, {field: getattr(committed, field)}))

    def has_pending_edit(self, task: TaskRef, field: str) -> bool:
        return (self.resolve_id(task), self._text_field(field)) in self._pending_text

    async def _flush_text(self, task_id: str, field: str) -> Optional[TaskRecord]:
        task_id = self.resolve_id(task_id)
        value = self._pending_text.pop((task_id, field), _MISSING)
        if value is _MISSING:
            return self.repository.get(task_id)

        committed = self._committed.get(task_id)
        if not is_draft_id(task_id) and committed is not None and getattr(committed, field) == value:
            return self.repository.get(task_id)
        return await self.commit_field(task_id, field, value)

    # -------------------------
    # Delete
    # -------------------------

    async def delete_task(self, task: TaskRef) -> bool:
        task_id = self.resolve_id(task)

        if is_draft_id(task_id):
            self._forget(task_id)
            return True

        try:
            await self.api.delete_task(task_id)
        except TaskNotFoundError:
            logger.info("task_already_deleted", extra={"task_id": task_id})
        except TaskApiError as exc:
            logger.warning("task_delete_failed", extra={"task_id": task_id, "status_code": exc.status_code})
            self._emit("error", "Failed to delete task", self._describe(exc), task_id)
            return False

        self._forget(task_id)
        self._emit("success", "Task deleted", None, task_id)
        return True

    # -------------------------
    # Lifecycle
    # -------------------------

    async def drain(self) -> None:
        """Wait for fired autosaves and draft creations that are still running."""
        await asyncio.gather(
            *(timer.wait() for timer in list(self._timers.values())),
            *list(self._creating.values()),
            return_exceptions=True,
        )

    def close(self) -> None:
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()

    # -------------------------
    # Helpers
    # -------------------------

    @staticmethod
    def _apply(task: TaskRecord, changes: Mapping[str, Any]) -> TaskRecord:
        return TaskRecord.model_validate({**task.model_dump(), **changes})

    @staticmethod
    def _editable(changes: Mapping[str, Any]) -> dict:
        normalized = {}
        for name, value in changes.items():
            field = field_name(name)
            if field not in EDITABLE_FIELDS:
                raise ValueError(f"Task field is not editable: {name}")
            normalized[field] = value
        return normalized

    @staticmethod
    def _text_field(name: str) -> str:
        field = field_name(name)
        if field not in TEXT_FIELDS:
            raise ValueError(f"Autosave only applies to text fields, not {name}")
        return field

    def _merge(self, server: TaskRecord) -> TaskRecord:
        if server.id not in self.repository:
            # deleted locally while the request was in flight
            return server
        self._committed[server.id] = server
        return self.repository.replace(self._overlay_pending(server))

    def _overlay_pending(self, task: TaskRecord) -> TaskRecord:
        pending = {field: value for (task_id, field), value in self._pending_text.items() if task_id == task.id}
        return self._apply(task, pending) if pending else task

    def _move_local_state(self, old_id: str, new_id: str) -> None:
        for key in [key for key in self._timers if key[0] == old_id]:
            self._timers[(new_id, key[1])] = self._timers.pop(key)
        for key in [key for key in self._pending_text if key[0] == old_id]:
            self._pending_text[(new_id, key[1])] = self._pending_text.pop(key)

    def _forget(self, task_id: str) -> None:
        for key in [key for key in self._timers if key[0] == task_id]:
            self._timers.pop(key).cancel()
        for key in [key for key in self._pending_text if key[0] == task_id]:
            del self._pending_text[key]
        self._committed.pop(task_id, None)
        for draft_id in [draft_id for draft_id, target in self._aliases.items() if target == task_id]:
            del self._aliases[draft_id]
        self.repository.remove(task_id)

    @staticmethod
    def _describe(exc: TaskApiError) -> str:
        if isinstance(exc.detail, str):
            return exc.detail
        return str(exc)

    def _emit(self, kind: str, title: str, message: Optional[str], task_id: Optional[str]) -> None:
        notification = Notification(type=kind, title=title, message=message, task_id=task_id)
        self.notifications.append(notification)
        if self._notify is not None:
            self._notify(notification)
