import asyncio
import copy
import uuid
from datetime import datetime, timedelta, timezone

from inspection_hub.store import EntityName, EntityNotFound, StoreError

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _matches(record, query):
    for field, expected in query.items():
        value = record.get(field)
        if isinstance(expected, dict) and "$in" in expected:
            if value not in expected["$in"]:
                return False
        elif value != expected:
            return False
    return True


def _sorted(records, sort):
    if not sort:
        return records
    field = sort.lstrip("-+")
    return sorted(
        records, key=lambda r: r.get(field) or "", reverse=sort.startswith("-")
    )


class FakeResource:
    def __init__(self, store, name):
        self._store = store
        self.name = name

    @property
    def _rows(self):
        return self._store.tables.setdefault(self.name, {})

    async def _call(self, op, entity_id=None):
        # every store call is a suspension point
        await asyncio.sleep(0)
        self._store.calls.append((self.name, op, entity_id))
        failures = self._store.failures
        failure = failures.get((self.name, op, entity_id)) or failures.get(
            (self.name, op, None)
        )
        if failure is not None:
            raise failure

    async def list(self, sort=None, limit=None):
        await self._call("list")
        rows = _sorted([copy.deepcopy(r) for r in self._rows.values()], sort)
        return rows[:limit] if limit is not None else rows

    async def filter(self, query, sort=None, limit=None):
        await self._call("filter")
        rows = [copy.deepcopy(r) for r in self._rows.values() if _matches(r, query)]
        rows = _sorted(rows, sort)
        return rows[:limit] if limit is not None else rows

    async def get(self, entity_id):
        await self._call("get", entity_id)
        if entity_id not in self._rows:
            raise EntityNotFound(self.name, entity_id)
        return copy.deepcopy(self._rows[entity_id])

    async def create(self, fields):
        await self._call("create")
        now = self._store.tick()
        record = copy.deepcopy(fields)
        record["id"] = uuid.uuid4().hex
        record["created_date"] = now
        record["updated_date"] = now
        record.setdefault("created_by", self._store.current_email())
        self._rows[record["id"]] = record
        return copy.deepcopy(record)

    async def update(self, entity_id, fields):
        await self._call("update", entity_id)
        if entity_id not in self._rows:
            raise EntityNotFound(self.name, entity_id)
        record = self._rows[entity_id]
        for key, value in fields.items():
            if key not in ("id", "created_date"):
                record[key] = copy.deepcopy(value)
        record["updated_date"] = self._store.tick()
        return copy.deepcopy(record)

    async def delete(self, entity_id):
        await self._call("delete", entity_id)
        self._rows.pop(entity_id, None)


class FakeEntityStore:
    """In-memory stand-in for the remote entity store.

    ``fail(entity, op, entity_id=None, error=None)`` makes matching calls raise;
    ``calls`` records every call in the order it ran.
    """

    def __init__(self, users=None, token=None):
        self.tables = {}
        self.calls = []
        self.failures = {}
        self.users = users or {}
        self.uploads = []
        self.token = token
        self._clock = [0]

    def tick(self):
        self._clock[0] += 1
        return (_EPOCH + timedelta(seconds=self._clock[0])).isoformat()

    def with_token(self, token):
        view = copy.copy(self)
        view.token = token
        return view

    def current_email(self):
        user = self.users.get(self.token)
        return user["email"] if user else None

    def fail(self, entity, op, entity_id=None, error=None):
        name = entity.value if isinstance(entity, EntityName) else entity
        self.failures[(name, op, entity_id)] = error or StoreError(
            f"{op} {name} failed", status_code=500
        )

    def clear_failures(self):
        self.failures.clear()

    def entity(self, name):
        return FakeResource(self, name.value if isinstance(name, EntityName) else name)

    @property
    def requests(self):
        return self.entity(EntityName.inspection_request)

    @property
    def documents(self):
        return self.entity(EntityName.client_document)

    @property
    def tasks(self):
        return self.entity(EntityName.task)

    @property
    def notes(self):
        return self.entity(EntityName.note)

    @property
    def statuses(self):
        return self.entity(EntityName.status_option)

    @property
    def archives(self):
        return self.entity(EntityName.archived_profile)

    def rows(self, entity):
        name = entity.value if isinstance(entity, EntityName) else entity
        return list(self.tables.get(name, {}).values())

    async def me(self):
        await asyncio.sleep(0)
        user = self.users.get(self.token)
        if user is None:
            raise StoreError("Unauthorized", status_code=401)
        return dict(user)

    async def upload_file(self, filename, content, content_type):
        await asyncio.sleep(0)
        self.uploads.append((filename, content, content_type))
        return f"https://files.example.com/{uuid.uuid4().hex}/{filename}"

    async def aclose(self):
        pass
