"""
Pytest configuration and fixtures for the Shopify bridge tests.

The Shopify Admin API is replaced by an in-memory fake served through
httpx.MockTransport, so no real API calls are made.
"""
import json
import os
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

os.environ.setdefault("STORE_NAME", "test-store")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test_token")
os.environ.setdefault("API_VERSION", "2024-01")

from shopify_bridge.core.config import Settings
from shopify_bridge.services.shopify import ShopifyService

API_PREFIX = "/admin/api/2024-01/"

CUSTOMER_METAFIELDS = re.compile(r"^customers/(\d+)/metafields\.json$")
METAFIELD = re.compile(r"^metafields/(\d+)\.json$")
CUSTOMER = re.compile(r"^customers/(\d+)\.json$")


def _json(status_code: int, payload: Any) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


class FakeShopify:
    """Minimal stateful stand-in for the Shopify Admin REST and GraphQL APIs."""

    def __init__(self):
        self.metafields: Dict[int, Dict[str, Any]] = {}
        self.metaobjects: Dict[str, Dict[str, Any]] = {}
        self.pages: List[List[Dict[str, Any]]] = []
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[Tuple[int, Any]] = None
        self._next_id = 1000

    # -- helpers -----------------------------------------------------------

    def seed_metafield(self, owner_id: int, namespace: str, key: str, type: str, value: str) -> Dict[str, Any]:
        self._next_id += 1
        record = {
            "id": self._next_id,
            "owner_id": owner_id,
            "owner_resource": "customer",
            "namespace": namespace,
            "key": key,
            "type": type,
            "value": value,
        }
        self.metafields[record["id"]] = record
        return record

    def find(self, owner_id: int, namespace: str, key: str) -> Optional[Dict[str, Any]]:
        for record in self.metafields.values():
            if record["owner_id"] == owner_id and record["namespace"] == namespace and record["key"] == key:
                return record
        return None

    def add_metaobject(self, numeric_id: int, handle: str, **fields: str) -> Dict[str, Any]:
        node = {
            "id": f"gid://shopify/Metaobject/{numeric_id}",
            "handle": handle,
            "fields": [{"key": k, "value": v} for k, v in fields.items()],
        }
        self.metaobjects[node["id"]] = node
        return node

    @property
    def writes(self) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method in ("POST", "PUT", "DELETE") and not r.url.path.endswith("graphql.json")
        ]

    @property
    def graphql_calls(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith("graphql.json")]

    # -- transport handler -------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return _json(*self.fail_with)

        path = request.url.path
        assert path.startswith(API_PREFIX), path
        path = path[len(API_PREFIX):]
        body = json.loads(request.content) if request.content else None

        if path == "graphql.json":
            return self._graphql(body)

        match = CUSTOMER_METAFIELDS.match(path)
        if match:
            owner_id = int(match.group(1))
            if request.method == "GET":
                namespace = request.url.params.get("namespace")
                key = request.url.params.get("key")
                found = [
                    m for m in self.metafields.values()
                    if m["owner_id"] == owner_id
                    and (namespace is None or m["namespace"] == namespace)
                    and (key is None or m["key"] == key)
                ]
                return _json(200, {"metafields": found})
            data = body["metafield"]
            if self.find(owner_id, data["namespace"], data["key"]):
                return _json(422, {"errors": {"key": ["must be unique within this namespace on this resource"]}})
            created = self.seed_metafield(owner_id, data["namespace"], data["key"], data["type"], data["value"])
            return _json(201, {"metafield": created})

        match = METAFIELD.match(path)
        if match:
            metafield_id = int(match.group(1))
            record = self.metafields.get(metafield_id)
            if record is None:
                return _json(404, {"errors": "Not Found"})
            if request.method == "DELETE":
                del self.metafields[metafield_id]
                return _json(200, {})
            record.update(value=body["metafield"]["value"], type=body["metafield"]["type"])
            return _json(200, {"metafield": record})

        match = CUSTOMER.match(path)
        if match and request.method == "PUT":
            return _json(200, {"customer": dict(body["customer"])})

        return _json(404, {"errors": "Not Found"})

    def _graphql(self, body: Dict[str, Any]) -> httpx.Response:
        query = body["query"]
        variables = body.get("variables") or {}
        if "metaobjects(" in query:
            after = variables.get("after")
            index = 0 if after is None else int(after.split("-")[1])
            has_next = index < len(self.pages) - 1
            return _json(200, {"data": {"metaobjects": {
                "nodes": self.pages[index] if self.pages else [],
                "pageInfo": {"hasNextPage": has_next, "endCursor": f"cursor-{index + 1}" if has_next else None},
            }}})
        if "metaobject(" in query:
            return _json(200, {"data": {"metaobject": self.metaobjects.get(variables.get("id"))}})
        return _json(200, {"errors": [{"message": "Unknown query"}]})


@pytest.fixture
def fake_shopify() -> FakeShopify:
    return FakeShopify()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(STORE_NAME="test-store", SHOPIFY_ACCESS_TOKEN="shpat_test_token", API_VERSION="2024-01")


@pytest.fixture
def shopify_service(fake_shopify: FakeShopify, test_settings: Settings) -> ShopifyService:
    return ShopifyService(test_settings, transport=httpx.MockTransport(fake_shopify.handler))


@pytest.fixture
def client(shopify_service: ShopifyService):
    """TestClient with the Shopify service swapped for the in-memory fake."""
    from fastapi.testclient import TestClient
    from shopify_bridge.dependencies import get_shopify_service
    from shopify_bridge.main import app

    app.dependency_overrides[get_shopify_service] = lambda: shopify_service
    yield TestClient(app)
    app.dependency_overrides.clear()
