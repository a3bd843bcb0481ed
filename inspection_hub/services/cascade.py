import asyncio
import logging

from inspection_hub.schemas.archive import ClientGraph
from inspection_hub.services.common import ids_of
from inspection_hub.store import EntityStore

logger = logging.getLogger(__name__)


async def collect_client_graph(store: EntityStore, client_name: str) -> ClientGraph:
    """Gather every request of ``client_name`` and the records hanging off them.

    An unknown client yields an empty graph rather than an error.
    """
    requests = await store.requests.filter({"client_name": client_name})
    if not requests:
        return ClientGraph(client_name=client_name)

    request_ids = ids_of(requests)
    documents, tasks = await asyncio.gather(
        store.documents.filter({"inspection_request_id": {"$in": request_ids}}),
        store.tasks.filter({"related_request_id": {"$in": request_ids}}),
    )

    task_ids = ids_of(tasks)
    notes = await store.notes.filter({"task_id": {"$in": task_ids}}) if task_ids else []

    graph = ClientGraph(
        client_name=client_name,
        requests=requests,
        documents=documents,
        tasks=tasks,
        notes=notes,
    )
    logger.debug("Collected client graph for %s: %s", client_name, graph.counts())
    return graph
