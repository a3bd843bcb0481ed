from __future__ import annotations

import logging

from inspection_hub.errors import NotFoundError, ValidationFailedError
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import InspectionRequestCreate, StatusType
from inspection_hub.services.common import strip_metadata
from inspection_hub.services.status import StatusOptions
from inspection_hub.store import EntityNotFound, EntityStore, Record

logger = logging.getLogger(__name__)


async def resolve_status(
    store: EntityStore, status_type: StatusType, label: str | None
) -> str | None:
    """Validate ``label`` against the defined options, defaulting to the first."""
    labels = await StatusOptions.labels(store, status_type)
    if label is None:
        return labels[0] if labels else None
    if label not in labels:
        raise ValidationFailedError(
            f'"{label}" is not a defined {status_type.value} status',
            details={"label": label, "allowed": labels},
        )
    return label


class InspectionRequests:
    @staticmethod
    async def create(
        store: EntityStore, payload: InspectionRequestCreate, actor: Actor
    ) -> Record:
        data = payload.model_dump(mode="json")
        data["client_name"] = data["client_name"].strip()
        data["status"] = await resolve_status(
            store, StatusType.inspection, payload.status
        )
        data["created_by"] = actor.email
        request = await store.requests.create(data)
        logger.info(
            "Created inspection request %s for %s", request["id"], data["client_name"]
        )
        return request

    @staticmethod
    async def get(store: EntityStore, request_id: str) -> Record:
        try:
            return await store.requests.get(request_id)
        except EntityNotFound:
            raise NotFoundError(
                "Inspection request not found", details={"request_id": request_id}
            ) from None

    @staticmethod
    async def change_status(
        store: EntityStore, request_id: str, status: str, actor: Actor
    ) -> Record:
        await InspectionRequests.get(store, request_id)
        label = await resolve_status(store, StatusType.inspection, status)
        request = await store.requests.update(request_id, {"status": label})
        logger.info(
            "Request %s moved to %s by %s", request_id, label, actor.email
        )
        return request

    @staticmethod
    async def touch(store: EntityStore, request_id: str) -> Record:
        """Re-save a request unchanged so the store bumps its ``updated_date``."""
        request = await InspectionRequests.get(store, request_id)
        return await store.requests.update(request_id, strip_metadata(request))


inspection_requests = InspectionRequests()
