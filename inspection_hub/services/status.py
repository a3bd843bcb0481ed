from __future__ import annotations

import logging
from collections import Counter

from inspection_hub.errors import (
    ConflictError,
    InUseError,
    NotFoundError,
    PartialFailureError,
    ValidationFailedError,
)
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import (
    StatusOptionCreate,
    StatusOptionUpdate,
    StatusType,
)
from inspection_hub.services.common import require_admin, run_concurrently, strip_metadata
from inspection_hub.services.response import ListResponseMixin
from inspection_hub.store import EntityName, EntityNotFound, EntityResource, EntityStore, Record

logger = logging.getLogger(__name__)

# Records carry a status by its label text, so each status type has one
# entity whose ``status`` field points at it.
STATUS_OWNERS = {
    StatusType.inspection: EntityName.inspection_request,
    StatusType.task: EntityName.task,
}


def owner_resource(store: EntityStore, status_type: StatusType | str) -> EntityResource:
    return store.entity(STATUS_OWNERS[StatusType(status_type)])


class StatusOptions(ListResponseMixin):
    @staticmethod
    async def list(
        store: EntityStore, status_type: StatusType, with_usage: bool = True
    ) -> list[Record]:
        statuses = await store.statuses.filter({"type": status_type.value})
        if not with_usage:
            return statuses
        usage = Counter(
            record.get("status")
            for record in await owner_resource(store, status_type).list()
        )
        return [{**status, "usage_count": usage[status["label"]]} for status in statuses]

    @staticmethod
    async def labels(store: EntityStore, status_type: StatusType) -> list[str]:
        statuses = await store.statuses.filter({"type": status_type.value})
        return [status["label"] for status in statuses]

    @staticmethod
    async def get(store: EntityStore, status_id: str) -> Record:
        try:
            return await store.statuses.get(status_id)
        except EntityNotFound:
            raise NotFoundError(
                "Status not found", details={"status_id": status_id}
            ) from None

    @staticmethod
    async def usage_count(store: EntityStore, status: Record) -> int:
        records = await owner_resource(store, status["type"]).filter(
            {"status": status["label"]}
        )
        return len(records)

    @staticmethod
    async def _ensure_label_free(
        store: EntityStore, status_type: StatusType | str, label: str
    ) -> None:
        existing = await store.statuses.filter(
            {"type": StatusType(status_type).value, "label": label}
        )
        if existing:
            raise ConflictError(
                f'A {StatusType(status_type).value} status named "{label}" already exists',
                details={"label": label, "type": StatusType(status_type).value},
            )

    @staticmethod
    async def create(
        store: EntityStore, payload: StatusOptionCreate, actor: Actor
    ) -> Record:
        require_admin(actor, "manage statuses")
        await StatusOptions._ensure_label_free(store, payload.type, payload.label)
        status = await store.statuses.create(payload.model_dump(mode="json"))
        logger.info("Created %s status %s", payload.type.value, payload.label)
        return status

    @staticmethod
    async def update(
        store: EntityStore, status_id: str, payload: StatusOptionUpdate, actor: Actor
    ) -> Record:
        """Change colors. Labels are changed with :meth:`rename`."""
        require_admin(actor, "manage statuses")
        await StatusOptions.get(store, status_id)
        data = payload.model_dump(exclude_unset=True)
        status = await store.statuses.update(status_id, data)
        logger.info("Updated status %s", status_id)
        return status

    @staticmethod
    async def rename(
        store: EntityStore, status_id: str, new_label: str, actor: Actor
    ) -> Record:
        """Rename a status and rewrite every record that carries its label.

        Records are migrated first and the definition last, so no record is
        ever left under a label that no status defines. If any record fails
        to update the definition keeps its old label.
        """
        require_admin(actor, "rename statuses")
        status = await StatusOptions.get(store, status_id)
        old_label = status["label"]
        new_label = new_label.strip()
        if not new_label:
            raise ValidationFailedError(
                "Status label cannot be blank", details={"status_id": status_id}
            )
        if new_label == old_label:
            return status
        await StatusOptions._ensure_label_free(store, status["type"], new_label)

        owner = owner_resource(store, status["type"])
        records = await owner.filter({"status": old_label})
        results, failures = await run_concurrently(
            owner.update(record["id"], {"status": new_label}) for record in records
        )
        if failures:
            failed_ids = [
                record["id"]
                for record, result in zip(records, results)
                if isinstance(result, Exception)
            ]
            logger.error(
                'Renaming status "%s" to "%s" failed for %d of %d records: %s',
                old_label,
                new_label,
                len(failures),
                len(records),
                failures[0],
            )
            raise PartialFailureError(
                f'Renaming "{old_label}" to "{new_label}" stopped; '
                f"{len(failed_ids)} record(s) still carry the old label",
                details={
                    "operation": "rename_status",
                    "status_id": status_id,
                    "step": "update_records",
                    "old_label": old_label,
                    "new_label": new_label,
                    "updated": len(records) - len(failed_ids),
                    "failed_ids": failed_ids,
                },
            ) from failures[0]

        renamed = await store.statuses.update(
            status_id, {**strip_metadata(status, "usage_count"), "label": new_label}
        )
        logger.info(
            'Renamed %s status "%s" to "%s" across %d records',
            status["type"],
            old_label,
            new_label,
            len(records),
        )
        return renamed

    @staticmethod
    async def delete(store: EntityStore, status_id: str, actor: Actor) -> None:
        """Delete a status nobody uses; a status in use is never cascaded."""
        require_admin(actor, "manage statuses")
        status = await StatusOptions.get(store, status_id)
        count = await StatusOptions.usage_count(store, status)
        if count > 0:
            raise InUseError(
                f'Cannot delete "{status["label"]}" - it is used by {count} '
                "record(s). Reassign them first.",
                details={"label": status["label"], "type": status["type"], "count": count},
            )
        await store.statuses.delete(status_id)
        logger.info("Deleted %s status %s", status["type"], status["label"])


status_options = StatusOptions()
