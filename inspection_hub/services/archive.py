"""Archive and restore of whole client profiles.

Archiving stores one ArchivedProfile snapshot of the client graph and then
deletes the originals tier by tier (notes, tasks, documents, requests).
Restoring re-creates the graph from the snapshot with fresh ids, relinking
``inspection_request_id``, ``related_request_id`` and ``task_id`` on the way
down, and finally deletes the snapshot.

Neither direction is transactional. A failure part way raises
:class:`PartialFailureError` describing what was already done; nothing is
rolled back.
"""

from __future__ import annotations

import logging
from typing import Any

from inspection_hub.errors import NotFoundError, PartialFailureError
from inspection_hub.schemas.archive import (
    ArchivedData,
    ArchiveOutcome,
    ArchivedProfileSummary,
    RestoreOutcome,
)
from inspection_hub.schemas.auth import Actor
from inspection_hub.services.cascade import collect_client_graph
from inspection_hub.services.common import (
    oldest_created_date,
    require_admin,
    run_concurrently,
    strip_metadata,
)
from inspection_hub.services.locks import client_locks
from inspection_hub.services.response import ListResponseMixin
from inspection_hub.store import EntityNotFound, EntityResource, EntityStore, Record

logger = logging.getLogger(__name__)


class _Progress:
    """Ids touched so far by a cascade, reported when it stops part way."""

    def __init__(self) -> None:
        self.done: dict[str, list[str]] = {
            "requests": [],
            "documents": [],
            "tasks": [],
            "notes": [],
        }

    def counts(self) -> dict[str, int]:
        return {kind: len(ids) for kind, ids in self.done.items()}


class Archives(ListResponseMixin):
    @staticmethod
    async def archive_client(
        store: EntityStore, client_name: str, actor: Actor
    ) -> Record | None:
        """Snapshot and delete a client profile.

        Returns the created ArchivedProfile, or ``None`` when the client has no
        requests and there is nothing to archive.
        """
        require_admin(actor, "archive client profiles")

        async with client_locks.hold(client_name, "archive"):
            graph = await collect_client_graph(store, client_name)
            if graph.is_empty:
                logger.info("Nothing to archive for client %s", client_name)
                return None

            snapshot = ArchivedData(
                requests=graph.requests,
                documents=graph.documents,
                tasks=graph.tasks,
                notes=graph.notes,
            )
            archive = await store.archives.create(
                {
                    "client_name": client_name,
                    "archived_data": snapshot.model_dump(mode="json"),
                    "deleted_by": actor.email,
                    "original_created_date": oldest_created_date(graph.requests),
                }
            )

            progress = _Progress()
            tiers = (
                ("notes", store.notes, graph.notes),
                ("tasks", store.tasks, graph.tasks),
                ("documents", store.documents, graph.documents),
                ("requests", store.requests, graph.requests),
            )
            for kind, resource, records in tiers:
                await Archives._delete_tier(
                    resource, kind, records, progress, client_name, archive["id"]
                )

        logger.info(
            "Archived client %s as %s by %s: %s",
            client_name,
            archive["id"],
            actor.email,
            graph.counts(),
        )
        return archive

    @staticmethod
    async def _delete_tier(
        resource: EntityResource,
        kind: str,
        records: list[Record],
        progress: _Progress,
        client_name: str,
        archive_id: str,
    ) -> None:
        results, failures = await run_concurrently(
            resource.delete(record["id"]) for record in records
        )
        failed_ids = []
        for record, result in zip(records, results):
            if isinstance(result, Exception):
                failed_ids.append(record["id"])
            else:
                progress.done[kind].append(record["id"])
        if not failures:
            return

        logger.error(
            "Archiving %s stopped deleting %s: %d of %d failed (%s)",
            client_name,
            kind,
            len(failures),
            len(records),
            failures[0],
        )
        raise PartialFailureError(
            f"Archive of {client_name} was saved but deleting {kind} failed; "
            "archiving again will remove the remaining records",
            details={
                "operation": "archive",
                "client_name": client_name,
                "archive_id": archive_id,
                "step": f"delete_{kind}",
                "deleted": progress.counts(),
                "failed_ids": failed_ids,
            },
        ) from failures[0]

    @staticmethod
    async def archive_clients(
        store: EntityStore, client_names: list[str], actor: Actor
    ) -> list[ArchiveOutcome]:
        """Archive several clients one after the other, stopping at the first error."""
        require_admin(actor, "archive client profiles")

        outcomes = []
        for client_name in dict.fromkeys(client_names):
            archive = await Archives.archive_client(store, client_name, actor)
            if archive is None:
                outcomes.append(ArchiveOutcome(client_name=client_name, archived=False))
                continue
            data = ArchivedData.model_validate(archive["archived_data"])
            outcomes.append(
                ArchiveOutcome(
                    client_name=client_name,
                    archived=True,
                    archive_id=archive["id"],
                    counts=_snapshot_counts(data),
                )
            )
        return outcomes

    @staticmethod
    async def get(store: EntityStore, archive_id: str, actor: Actor) -> Record:
        require_admin(actor, "view archived profiles")
        try:
            return await store.archives.get(archive_id)
        except EntityNotFound:
            raise NotFoundError(
                "Archived profile not found", details={"archive_id": archive_id}
            ) from None

    @staticmethod
    async def list(
        store: EntityStore, actor: Actor, limit: int | None = None
    ) -> list[ArchivedProfileSummary]:
        require_admin(actor, "view archived profiles")
        archives = await store.archives.list(sort="-created_date", limit=limit)
        return [
            ArchivedProfileSummary(
                id=archive["id"],
                client_name=archive["client_name"],
                deleted_by=archive.get("deleted_by"),
                original_created_date=archive.get("original_created_date"),
                created_date=archive.get("created_date"),
                counts=_snapshot_counts(
                    ArchivedData.model_validate(archive.get("archived_data") or {})
                ),
            )
            for archive in archives
        ]

    @staticmethod
    async def restore(store: EntityStore, archive_id: str, actor: Actor) -> RestoreOutcome:
        """Re-create an archived client graph under new ids and drop the snapshot.

        Requests are created first so that every old request id has a new one;
        then, request by request, its documents, its tasks, and each task's
        notes. A retry after a partial failure creates duplicates.
        """
        archive = await Archives.get(store, archive_id, actor)
        client_name = archive["client_name"]

        async with client_locks.hold(client_name, "restore"):
            # re-read under the lock; a restore that finished meanwhile deleted it
            archive = await Archives.get(store, archive_id, actor)
            data = ArchivedData.model_validate(archive.get("archived_data") or {})
            progress = _Progress()
            step = "create_requests"
            try:
                request_ids = await Archives._create_all(
                    store.requests,
                    [strip_metadata(request) for request in data.requests],
                    progress.done["requests"],
                )
                new_request_ids = {
                    request["id"]: new_id
                    for request, new_id in zip(data.requests, request_ids)
                }

                for old_request_id, new_request_id in new_request_ids.items():
                    step = "create_documents"
                    await Archives._create_all(
                        store.documents,
                        [
                            {
                                **strip_metadata(doc, "inspection_request_id"),
                                "inspection_request_id": new_request_id,
                            }
                            for doc in data.documents
                            if doc.get("inspection_request_id") == old_request_id
                        ],
                        progress.done["documents"],
                    )

                    step = "create_tasks"
                    tasks = [
                        task
                        for task in data.tasks
                        if task.get("related_request_id") == old_request_id
                    ]
                    task_ids = await Archives._create_all(
                        store.tasks,
                        [
                            {
                                **strip_metadata(task, "related_request_id"),
                                "related_request_id": new_request_id,
                            }
                            for task in tasks
                        ],
                        progress.done["tasks"],
                    )

                    step = "create_notes"
                    new_task_ids = {
                        task["id"]: new_id for task, new_id in zip(tasks, task_ids)
                    }
                    await Archives._create_all(
                        store.notes,
                        [
                            {
                                **strip_metadata(note, "task_id"),
                                "task_id": new_task_ids[note["task_id"]],
                            }
                            for note in data.notes
                            if note.get("task_id") in new_task_ids
                        ],
                        progress.done["notes"],
                    )

                step = "delete_archive"
                await store.archives.delete(archive_id)
            except Exception as e:
                logger.error(
                    "Restore of %s (%s) failed at %s after creating %s: %s",
                    client_name,
                    archive_id,
                    step,
                    progress.counts(),
                    e,
                )
                raise PartialFailureError(
                    f"Restore of {client_name} stopped at {step}; records created so "
                    "far are live and the archive was kept, so restoring again "
                    "creates duplicates",
                    details={
                        "operation": "restore",
                        "client_name": client_name,
                        "archive_id": archive_id,
                        "step": step,
                        "created": progress.done,
                    },
                ) from e

        skipped = _unlinked_counts(data, progress)
        if any(skipped.values()):
            logger.warning(
                "Restore of %s skipped records whose parent was not archived: %s",
                client_name,
                skipped,
            )
        logger.info(
            "Restored client %s from %s by %s: %s",
            client_name,
            archive_id,
            actor.email,
            progress.counts(),
        )
        return RestoreOutcome(
            archive_id=archive_id, client_name=client_name, counts=progress.counts()
        )

    @staticmethod
    async def _create_all(
        resource: EntityResource, payloads: list[dict[str, Any]], created: list[str]
    ) -> list[str]:
        """Create ``payloads`` concurrently; new ids come back in payload order."""
        results, failures = await run_concurrently(
            resource.create(payload) for payload in payloads
        )
        created.extend(
            result["id"] for result in results if not isinstance(result, Exception)
        )
        if failures:
            raise failures[0]
        return [result["id"] for result in results]

    @staticmethod
    async def delete(store: EntityStore, archive_id: str, actor: Actor) -> None:
        """Permanently discard an archived profile."""
        archive = await Archives.get(store, archive_id, actor)
        await store.archives.delete(archive_id)
        logger.info(
            "Permanently deleted archive %s of %s by %s",
            archive_id,
            archive["client_name"],
            actor.email,
        )


def _snapshot_counts(data: ArchivedData) -> dict[str, int]:
    return {
        "requests": len(data.requests),
        "documents": len(data.documents),
        "tasks": len(data.tasks),
        "notes": len(data.notes),
    }


def _unlinked_counts(data: ArchivedData, progress: _Progress) -> dict[str, int]:
    restored = progress.counts()
    return {kind: total - restored[kind] for kind, total in _snapshot_counts(data).items()}


archives = Archives()
