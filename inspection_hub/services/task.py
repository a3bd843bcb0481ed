from __future__ import annotations

import logging
from datetime import datetime, timezone

from inspection_hub.errors import NotFoundError
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import NoteCreate, StatusType, TaskCreate, TaskUpdate
from inspection_hub.services.common import require_admin, run_concurrently, sees_everything
from inspection_hub.services.request import InspectionRequests, resolve_status
from inspection_hub.services.response import ListResponseMixin
from inspection_hub.store import EntityNotFound, EntityStore, Record, StoreError

logger = logging.getLogger(__name__)

COMPLETED_STATUS = "Completed"


class Tasks(ListResponseMixin):
    @staticmethod
    async def create(store: EntityStore, payload: TaskCreate, actor: Actor) -> Record:
        request = await InspectionRequests.get(store, payload.related_request_id)

        data = payload.model_dump(mode="json")
        data["status"] = await resolve_status(store, StatusType.task, payload.status)
        if not data.get("title"):
            client_name = request.get("client_name") or "General"
            data["title"] = f"{payload.request_type.value} Request for {client_name}"
        data["created_by"] = actor.email
        task = await store.tasks.create(data)
        logger.info("Created task %s on request %s", task["id"], request["id"])

        # Keep the request at the top of "recently updated" lists.
        try:
            await InspectionRequests.touch(store, request["id"])
        except (StoreError, NotFoundError) as e:
            logger.warning(
                "Could not bump updated_date of request %s: %s", request["id"], e
            )
        return task

    @staticmethod
    async def get(store: EntityStore, task_id: str) -> Record:
        try:
            return await store.tasks.get(task_id)
        except EntityNotFound:
            raise NotFoundError("Task not found", details={"task_id": task_id}) from None

    @staticmethod
    async def list(store: EntityStore, actor: Actor) -> list[Record]:
        tasks = await store.tasks.list(sort="-created_date")
        if sees_everything(actor):
            return tasks
        return [
            task
            for task in tasks
            if actor.email in (task.get("created_by"), task.get("assigned_to"))
        ]

    @staticmethod
    async def update(
        store: EntityStore, task_id: str, payload: TaskUpdate, actor: Actor
    ) -> Record:
        task = await Tasks.get(store, task_id)
        data = payload.model_dump(exclude_unset=True, mode="json")
        if "status" in data:
            data["status"] = await resolve_status(store, StatusType.task, data["status"])
            if data["status"] == COMPLETED_STATUS and task.get("status") != COMPLETED_STATUS:
                data["completed_date"] = datetime.now(timezone.utc).isoformat()
            elif data["status"] != COMPLETED_STATUS:
                data["completed_date"] = None
        updated = await store.tasks.update(task_id, data)
        logger.info("Updated task %s by %s", task_id, actor.email)
        return updated

    @staticmethod
    async def delete(store: EntityStore, task_id: str, actor: Actor) -> None:
        """Delete a task together with its notes, notes first."""
        require_admin(actor, "delete tasks")
        await Tasks.get(store, task_id)
        notes = await store.notes.filter({"task_id": task_id})
        _, failures = await run_concurrently(
            store.notes.delete(note["id"]) for note in notes
        )
        if failures:
            # the task stays so its remaining notes are not orphaned
            raise failures[0]
        await store.tasks.delete(task_id)
        logger.info("Deleted task %s and %d notes", task_id, len(notes))


class Notes(ListResponseMixin):
    @staticmethod
    async def create(
        store: EntityStore, task_id: str, payload: NoteCreate, actor: Actor
    ) -> Record:
        await Tasks.get(store, task_id)
        note = await store.notes.create(
            {"task_id": task_id, "content": payload.content, "created_by": actor.email}
        )
        logger.info("Added note %s to task %s", note["id"], task_id)
        return note

    @staticmethod
    async def list(store: EntityStore, task_id: str) -> list[Record]:
        await Tasks.get(store, task_id)
        return await store.notes.filter({"task_id": task_id}, sort="-created_date")


tasks = Tasks()
notes = Notes()
