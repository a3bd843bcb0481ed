"""Async client for the remote entity-storage/auth service.

Every entity type is exposed as an :class:`EntityResource` with the same
list/filter/get/create/update/delete surface. Records travel as plain dicts
so fields the service adds (``id``, ``created_date``, ``updated_date``,
``created_by``) are kept verbatim.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

import httpx

from inspection_hub.config import settings

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class EntityName(str, enum.Enum):
    inspection_request = "InspectionRequest"
    client_document = "ClientDocument"
    task = "Task"
    note = "Note"
    status_option = "StatusOption"
    archived_profile = "ArchivedProfile"


class StoreError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EntityNotFound(StoreError):
    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found", status_code=404)
        self.entity = entity
        self.entity_id = entity_id


def _raise_for_status(response: httpx.Response, context: str) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
        message = body.get("message") or body.get("detail") or response.text
    except (ValueError, AttributeError):
        message = response.text
    raise StoreError(
        f"{context} failed with HTTP {response.status_code}: {message}",
        status_code=response.status_code,
    )


class EntityResource:
    def __init__(self, store: "EntityStore", name: str) -> None:
        self._store = store
        self.name = name

    @property
    def _path(self) -> str:
        return f"{self._store.app_path}/entities/{self.name}"

    async def list(self, sort: str | None = None, limit: int | None = None) -> list[Record]:
        params: dict[str, Any] = {}
        if sort:
            params["sort"] = sort
        if limit is not None:
            params["limit"] = limit
        response = await self._store.request("GET", self._path, params=params)
        _raise_for_status(response, f"List {self.name}")
        return response.json()

    async def filter(
        self,
        query: dict[str, Any],
        sort: str | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        """Match on ``{"field": value}`` or ``{"field": {"$in": [...]}}``."""
        params: dict[str, Any] = {"q": json.dumps(query, default=str)}
        if sort:
            params["sort"] = sort
        if limit is not None:
            params["limit"] = limit
        response = await self._store.request("GET", self._path, params=params)
        _raise_for_status(response, f"Filter {self.name}")
        return response.json()

    async def get(self, entity_id: str) -> Record:
        response = await self._store.request("GET", f"{self._path}/{entity_id}")
        if response.status_code == 404:
            raise EntityNotFound(self.name, entity_id)
        _raise_for_status(response, f"Get {self.name} {entity_id}")
        return response.json()

    async def create(self, fields: Record) -> Record:
        response = await self._store.request("POST", self._path, json=fields)
        _raise_for_status(response, f"Create {self.name}")
        return response.json()

    async def update(self, entity_id: str, fields: Record) -> Record:
        response = await self._store.request(
            "PUT", f"{self._path}/{entity_id}", json=fields
        )
        if response.status_code == 404:
            raise EntityNotFound(self.name, entity_id)
        _raise_for_status(response, f"Update {self.name} {entity_id}")
        return response.json()

    async def delete(self, entity_id: str) -> None:
        response = await self._store.request("DELETE", f"{self._path}/{entity_id}")
        if response.status_code == 404:
            logger.debug("%s %s already deleted", self.name, entity_id)
            return
        _raise_for_status(response, f"Delete {self.name} {entity_id}")


class EntityStore:
    def __init__(
        self,
        client: httpx.AsyncClient,
        app_id: str | None = None,
        token: str | None = None,
    ) -> None:
        self._client = client
        self.app_id = app_id if app_id is not None else settings.store_app_id
        self.token = token

    @classmethod
    def from_settings(cls, transport: httpx.AsyncBaseTransport | None = None) -> "EntityStore":
        headers = {"Accept": "application/json"}
        if settings.store_api_key:
            headers["api_key"] = settings.store_api_key
        client = httpx.AsyncClient(
            base_url=settings.store_base_url,
            headers=headers,
            timeout=settings.store_timeout_seconds,
            limits=httpx.Limits(max_connections=settings.store_max_connections),
            transport=transport,
        )
        return cls(client)

    def with_token(self, token: str | None) -> "EntityStore":
        """Same connection pool, requests authenticated as another user."""
        return EntityStore(self._client, app_id=self.app_id, token=token)

    @property
    def app_path(self) -> str:
        return f"/api/apps/{self.app_id}"

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            return await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path} failed: {e}") from e

    def entity(self, name: EntityName | str) -> EntityResource:
        return EntityResource(self, name.value if isinstance(name, EntityName) else name)

    @property
    def requests(self) -> EntityResource:
        return self.entity(EntityName.inspection_request)

    @property
    def documents(self) -> EntityResource:
        return self.entity(EntityName.client_document)

    @property
    def tasks(self) -> EntityResource:
        return self.entity(EntityName.task)

    @property
    def notes(self) -> EntityResource:
        return self.entity(EntityName.note)

    @property
    def statuses(self) -> EntityResource:
        return self.entity(EntityName.status_option)

    @property
    def archives(self) -> EntityResource:
        return self.entity(EntityName.archived_profile)

    async def me(self) -> Record:
        response = await self.request("GET", f"{self.app_path}/entities/User/me")
        _raise_for_status(response, "Load current user")
        return response.json()

    async def upload_file(
        self, filename: str, content: bytes, content_type: str
    ) -> str:
        response = await self.request(
            "POST",
            f"{self.app_path}/integration-endpoints/Core/UploadFile",
            files={"file": (filename, content, content_type)},
        )
        _raise_for_status(response, f"Upload {filename}")
        return response.json()["file_url"]

    async def aclose(self) -> None:
        await self._client.aclose()
