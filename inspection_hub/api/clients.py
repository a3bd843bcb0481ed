from fastapi import APIRouter, Depends, Response, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.archive import (
    ArchiveOutcome,
    BulkArchiveRequest,
    ClientGraph,
    ClientSummary,
)
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.common import ListResponse
from inspection_hub.schemas.inspection import ClientInfoUpdate, InspectionRequestRead
from inspection_hub.services import archive as archive_service
from inspection_hub.services import client as client_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("", response_model=ListResponse[ClientSummary])
async def list_clients(
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await client_service.client_profiles.list_response(store, actor)


# Declared before "/{client_name}" routes so "archive" is not read as a name.
@router.post("/archive", response_model=list[ArchiveOutcome])
async def archive_clients(
    payload: BulkArchiveRequest,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> list[ArchiveOutcome]:
    return await archive_service.archives.archive_clients(
        store, payload.client_names, actor
    )


@router.get("/{client_name}", response_model=ClientGraph)
async def get_client(
    client_name: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> ClientGraph:
    return await client_service.client_profiles.get(store, client_name, actor)


@router.patch("/{client_name}", response_model=list[InspectionRequestRead])
async def update_client_info(
    client_name: str,
    payload: ClientInfoUpdate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> list[dict]:
    return await client_service.client_profiles.update_info(
        store, client_name, payload, actor
    )


@router.post(
    "/{client_name}/archive",
    response_model=ArchiveOutcome,
    responses={204: {"description": "Nothing to archive"}},
)
async def archive_client(
    client_name: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
):
    outcomes = await archive_service.archives.archive_clients(
        store, [client_name], actor
    )
    if not outcomes[0].archived:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return outcomes[0]
