from fastapi import Depends, HTTPException, Request, status

from inspection_hub.schemas.auth import Actor
from inspection_hub.store import EntityStore, StoreError


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def get_store(request: Request) -> EntityStore:
    """The shared store client, authenticated as the calling user."""
    store: EntityStore = request.app.state.store
    return store.with_token(_bearer_token(request))


async def require_user_auth(
    request: Request, store: EntityStore = Depends(get_store)
) -> Actor:
    if not _bearer_token(request):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )
    try:
        user = await store.me()
    except StoreError as e:
        if e.status_code in (401, 403):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
            ) from e
        raise
    return Actor.model_validate(user)


__all__ = ["get_store", "require_user_auth"]
