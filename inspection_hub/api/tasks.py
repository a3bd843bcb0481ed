from fastapi import APIRouter, Depends, status

from inspection_hub.api.deps import get_store, require_user_auth
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.common import ListResponse
from inspection_hub.schemas.inspection import (
    NoteCreate,
    NoteRead,
    TaskCreate,
    TaskRead,
    TaskUpdate,
)
from inspection_hub.services import task as task_service
from inspection_hub.store import EntityStore

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=ListResponse[TaskRead])
async def list_tasks(
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.tasks.list_response(store, actor)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.tasks.create(store, payload, actor)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.tasks.get(store, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.tasks.update(store, task_id, payload, actor)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> None:
    await task_service.tasks.delete(store, task_id, actor)


@router.get("/{task_id}/notes", response_model=ListResponse[NoteRead])
async def list_notes(
    task_id: str,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.notes.list_response(store, task_id)


@router.post(
    "/{task_id}/notes", response_model=NoteRead, status_code=status.HTTP_201_CREATED
)
async def add_note(
    task_id: str,
    payload: NoteCreate,
    store: EntityStore = Depends(get_store),
    actor: Actor = Depends(require_user_auth),
) -> dict:
    return await task_service.notes.create(store, task_id, payload, actor)
