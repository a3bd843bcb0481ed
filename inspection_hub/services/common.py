import asyncio
from collections.abc import Awaitable, Iterable
from datetime import datetime, timezone
from typing import Any

from inspection_hub.errors import PermissionDeniedError
from inspection_hub.schemas.auth import Actor

STORE_MANAGED_FIELDS = ("id", "created_date", "updated_date")


def strip_metadata(record: dict[str, Any], *extra: str) -> dict[str, Any]:
    """Copy of ``record`` without store-managed fields (and any ``extra`` keys).

    ``created_by`` is data, not metadata, and is kept.
    """
    dropped = set(STORE_MANAGED_FIELDS) | set(extra)
    return {key: value for key, value in record.items() if key not in dropped}


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    # the store emits naive UTC timestamps
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def oldest_created_date(records: Iterable[dict[str, Any]]) -> Any:
    """``created_date`` of the oldest record, whatever order ``records`` are in."""
    oldest = None
    oldest_at = None
    for record in records:
        created_at = parse_timestamp(record.get("created_date"))
        if created_at is None:
            continue
        if oldest_at is None or created_at < oldest_at:
            oldest = record.get("created_date")
            oldest_at = created_at
    return oldest


def ids_of(records: Iterable[dict[str, Any]]) -> list[str]:
    return [record["id"] for record in records]


async def run_concurrently(
    calls: Iterable[Awaitable[Any]],
) -> tuple[list[Any], list[Exception]]:
    """Await every call, returning results aligned with ``calls`` and failures.

    A failed call leaves its exception in the results list at its position.
    """
    results = await asyncio.gather(*calls, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
    failures = [result for result in results if isinstance(result, Exception)]
    return results, failures


def require_admin(actor: Actor, action: str) -> None:
    if not actor.is_admin:
        raise PermissionDeniedError(
            f"Only administrators can {action}",
            details={"actor": actor.email, "role": actor.role},
        )


def sees_everything(actor: Actor) -> bool:
    return actor.is_admin or bool(actor.is_manager)
