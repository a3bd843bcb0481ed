from fastapi import APIRouter, Depends, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import (
    InspectionRequestCreate,
    InspectionRequestRead,
    StatusChange,
)
from inspection_hub.services import request as request_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/requests", tags=["requests"])


@router.post("", response_model=InspectionRequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: InspectionRequestCreate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await request_service.inspection_requests.create(store, payload, actor)


@router.get("/{request_id}", response_model=InspectionRequestRead)
async def get_request(
    request_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await request_service.inspection_requests.get(store, request_id)


@router.patch("/{request_id}/status", response_model=InspectionRequestRead)
async def change_request_status(
    request_id: str,
    payload: StatusChange,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await request_service.inspection_requests.change_status(
        store, request_id, payload.status, actor
    )
