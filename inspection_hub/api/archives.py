from fastapi import APIRouter, Depends, Query, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.archive import (
    ArchivedProfileRead,
    ArchivedProfileSummary,
    RestoreOutcome,
)
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.common import ListResponse
from inspection_hub.services import archive as archive_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/archives", tags=["archives"])


@router.get("", response_model=ListResponse[ArchivedProfileSummary])
async def list_archives(
    limit: int | None = Query(default=None, ge=1, le=500),
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await archive_service.archives.list_response(store, actor, limit)


@router.get("/{archive_id}", response_model=ArchivedProfileRead)
async def get_archive(
    archive_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await archive_service.archives.get(store, archive_id, actor)


@router.post("/{archive_id}/restore", response_model=RestoreOutcome)
async def restore_archive(
    archive_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> RestoreOutcome:
    return await archive_service.archives.restore(store, archive_id, actor)


@router.delete("/{archive_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_archive(
    archive_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> None:
    await archive_service.archives.delete(store, archive_id, actor)
