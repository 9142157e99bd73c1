import json
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("WEBHOOK_SECRET", "hook-secret")

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from pymongo.errors import PyMongoError  # noqa: E402

from app.api.dependencies import get_device_token_model, get_http_client  # noqa: E402
from app.main import app  # noqa: E402
from app.models.device_token import DeviceTokenModel  # noqa: E402
from app.utils.user import create_access_token  # noqa: E402


class FakeResult:
    def __init__(self, deleted_count: int = 0):
        self.deleted_count = deleted_count


class FakeCursor:
    def __init__(self, docs: list[dict]):
        self.docs = docs

    def sort(self, *args, **kwargs):
        return self

    def batch_size(self, size: int):
        return self

    def __aiter__(self):
        self._iter = iter(self.docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    """Just enough of a motor collection for the push_tokens queries."""

    def __init__(self):
        self.docs: list[dict] = []
        self.indexes: list = []
        self.fail = False

    def _check(self):
        if self.fail:
            raise PyMongoError("store unavailable")

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))

    async def update_one(self, query: dict, update: dict, upsert: bool = False):
        self._check()
        for doc in self.docs:
            if all(doc.get(k) == v for k, v in query.items()):
                doc.update(update["$set"])
                return FakeResult()
        if upsert:
            self.docs.append({"_id": len(self.docs) + 1, **query, **update["$set"]})
        return FakeResult()

    def find(self, query: dict):
        self._check()
        return FakeCursor(list(self.docs))

    async def delete_many(self, query: dict):
        self._check()
        targets = set(query["token"]["$in"])
        before = len(self.docs)
        self.docs = [doc for doc in self.docs if doc["token"] not in targets]
        return FakeResult(before - len(self.docs))

    async def delete_one(self, query: dict):
        self._check()
        for doc in self.docs:
            if all(doc.get(k) == v for k, v in query.items()):
                self.docs.remove(doc)
                return FakeResult(1)
        return FakeResult(0)


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())


class FakeGateway:
    """Records every batch posted to the push API and answers with ok tickets."""

    def __init__(self):
        self.batches: list[list[dict]] = []
        self.fail_on: set[int] = set()
        self.unregistered: set[str] = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        batch = json.loads(request.content)
        self.batches.append(batch)
        if len(self.batches) in self.fail_on:
            raise httpx.ConnectError("gateway unreachable", request=request)

        tickets = []
        for message in batch:
            if message["to"] in self.unregistered:
                tickets.append(
                    {
                        "status": "error",
                        "message": f"{message['to']} is not a registered push token",
                        "details": {"error": "DeviceNotRegistered"},
                    }
                )
            else:
                tickets.append({"status": "ok", "id": f"ticket-{message['to']}"})
        return httpx.Response(200, json={"data": tickets})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def make_tokens(count: int) -> list[str]:
    return [f"ExponentPushToken[{i:04d}]" for i in range(count)]


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def token_collection(db):
    return db["push_tokens"]


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(db, gateway):
    app.dependency_overrides[get_device_token_model] = lambda: DeviceTokenModel(db)
    app.dependency_overrides[get_http_client] = gateway.client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    token = create_access_token({"sub": "user-1", "email": "member@example.com"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    token = create_access_token(
        {"sub": "admin-1", "email": "admin@example.com", "app_metadata": {"role": "admin"}}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def webhook_headers():
    return {"X-Webhook-Secret": "hook-secret"}
