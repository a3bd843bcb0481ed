from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from inspection_hub.api.archives import router as archives_router
from inspection_hub.api.clients import router as clients_router
from inspection_hub.api.deps import require_user_auth
from inspection_hub.api.documents import router as documents_router
from inspection_hub.api.requests import router as requests_router
from inspection_hub.api.statuses import router as statuses_router
from inspection_hub.api.tasks import router as tasks_router
from inspection_hub.config import settings
from inspection_hub.errors import register_error_handlers
from inspection_hub.logging import configure_logging
from inspection_hub.store import EntityStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = EntityStore.from_settings()
    try:
        yield
    finally:
        await app.state.store.aclose()


app = FastAPI(title=f"{settings.brand_name} API", lifespan=lifespan)

configure_logging()
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


_include_api_router(clients_router, dependencies=[Depends(require_user_auth)])
_include_api_router(archives_router, dependencies=[Depends(require_user_auth)])
_include_api_router(statuses_router, dependencies=[Depends(require_user_auth)])
_include_api_router(requests_router, dependencies=[Depends(require_user_auth)])
_include_api_router(tasks_router, dependencies=[Depends(require_user_auth)])
_include_api_router(documents_router, dependencies=[Depends(require_user_auth)])


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
