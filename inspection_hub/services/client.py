from __future__ import annotations

import logging

from inspection_hub.errors import NotFoundError, PartialFailureError, PermissionDeniedError
from inspection_hub.schemas.archive import ClientGraph, ClientSummary
from inspection_hub.schemas.auth import Actor
from inspection_hub.schemas.inspection import ClientInfoUpdate
from inspection_hub.services.cascade import collect_client_graph
from inspection_hub.services.common import (
    parse_timestamp,
    run_concurrently,
    sees_everything,
)
from inspection_hub.services.response import ListResponseMixin
from inspection_hub.store import EntityStore, Record

logger = logging.getLogger(__name__)


def _newest_first(records: list[Record]) -> list[Record]:
    return sorted(
        records,
        key=lambda record: record.get("created_date") or "",
        reverse=True,
    )


def check_access(actor: Actor, client_name: str, requests: list[Record]) -> None:
    if sees_everything(actor):
        return
    if any(request.get("created_by") == actor.email for request in requests):
        return
    raise PermissionDeniedError(
        f"You do not have access to client {client_name}",
        details={"client_name": client_name, "actor": actor.email},
    )


class ClientProfiles(ListResponseMixin):
    @staticmethod
    async def get(store: EntityStore, client_name: str, actor: Actor) -> ClientGraph:
        graph = await collect_client_graph(store, client_name)
        if graph.is_empty:
            raise NotFoundError(
                "Client not found", details={"client_name": client_name}
            )
        check_access(actor, client_name, graph.requests)
        return ClientGraph(
            client_name=client_name,
            requests=graph.requests,
            documents=_newest_first(graph.documents),
            tasks=_newest_first(graph.tasks),
            notes=graph.notes,
        )

    @staticmethod
    async def list(store: EntityStore, actor: Actor) -> list[ClientSummary]:
        """One row per client, most recently active first."""
        requests = await store.requests.list(sort="-updated_date")
        if not sees_everything(actor):
            requests = [r for r in requests if r.get("created_by") == actor.email]

        grouped: dict[str, list[Record]] = {}
        for request in requests:
            grouped.setdefault(request.get("client_name") or "", []).append(request)

        summaries = []
        for client_name, client_requests in grouped.items():
            if not client_name:
                continue
            latest = max(
                client_requests,
                key=lambda r: parse_timestamp(r.get("updated_date"))
                or parse_timestamp(r.get("created_date"))
                or parse_timestamp("1970-01-01T00:00:00"),
            )
            summaries.append(
                ClientSummary(
                    client_name=client_name,
                    request_count=len(client_requests),
                    latest_status=latest.get("status"),
                    property_address=latest.get("property_address"),
                    last_activity=latest.get("updated_date") or latest.get("created_date"),
                )
            )
        return summaries

    @staticmethod
    async def update_info(
        store: EntityStore, client_name: str, payload: ClientInfoUpdate, actor: Actor
    ) -> list[Record]:
        """Apply shared contact details to every request of the client."""
        requests = await store.requests.filter({"client_name": client_name})
        if not requests:
            raise NotFoundError(
                "Client not found", details={"client_name": client_name}
            )
        check_access(actor, client_name, requests)

        data = payload.model_dump(exclude_unset=True)
        if not data:
            return requests
        results, failures = await run_concurrently(
            store.requests.update(request["id"], data) for request in requests
        )
        if failures:
            raise PartialFailureError(
                f"Updated {len(requests) - len(failures)} of {len(requests)} "
                f"requests for {client_name}",
                details={
                    "operation": "update_client_info",
                    "client_name": client_name,
                    "step": "update_requests",
                    "failed_ids": [
                        request["id"]
                        for request, result in zip(requests, results)
                        if isinstance(result, Exception)
                    ],
                },
            ) from failures[0]
        logger.info(
            "Updated %s on %d requests of %s", sorted(data), len(requests), client_name
        )
        return results


client_profiles = ClientProfiles()
