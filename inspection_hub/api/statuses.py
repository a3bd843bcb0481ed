from fastapi import APIRouter, Depends, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.common import ListResponse
from inspection_hub.schemas.inspection import (
    StatusOptionCreate,
    StatusOptionRead,
    StatusOptionUpdate,
    StatusRename,
    StatusType,
)
from inspection_hub.services import status as status_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/statuses", tags=["statuses"])


@router.get("", response_model=ListResponse[StatusOptionRead])
async def list_statuses(
    type: StatusType = StatusType.inspection,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await status_service.status_options.list_response(store, type)


@router.post("", response_model=StatusOptionRead, status_code=status.HTTP_201_CREATED)
async def create_status(
    payload: StatusOptionCreate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await status_service.status_options.create(store, payload, actor)


@router.patch("/{status_id}", response_model=StatusOptionRead)
async def update_status(
    status_id: str,
    payload: StatusOptionUpdate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await status_service.status_options.update(store, status_id, payload, actor)


@router.post("/{status_id}/rename", response_model=StatusOptionRead)
async def rename_status(
    status_id: str,
    payload: StatusRename,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await status_service.status_options.rename(
        store, status_id, payload.new_label, actor
    )


@router.delete("/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_status(
    status_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> None:
    await status_service.status_options.delete(store, status_id, actor)
