"""
Tests for the interaction log stored in custom.customer_interactions.
"""
import json

import pytest

from shopify_bridge.models.interaction import InteractionEvent
from shopify_bridge.models.metafield import Metafield
from shopify_bridge.services.interactions import (
    INTERACTIONS_KEY,
    INTERACTIONS_NAMESPACE,
    InteractionTracker,
    decode_interaction_log,
    plan_append,
)

OWNER = 501


def _event(event_type="add_to_cart", product_id=11, timestamp="2024-03-01T10:00:00.000Z"):
    return InteractionEvent(
        eventType=event_type, productId=product_id, variantId=product_id * 10,
        customerId=OWNER, visitorId=None, timestamp=timestamp,
    )


def _stored_log(fake_shopify):
    return json.loads(fake_shopify.find(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY)["value"])


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("raw, expected", [
    (None, []),
    ("", []),
    ("not json {", []),
    ('{"eventType": "legacy"}', [{"eventType": "legacy"}]),
    ('[{"a": 1}, {"b": 2}]', [{"a": 1}, {"b": 2}]),
])
def test_decode_interaction_log(raw, expected):
    assert decode_interaction_log(raw, OWNER) == expected


def test_plan_append_keeps_snapshot_id_for_update():
    current = Metafield(id=99, namespace="custom", key=INTERACTIONS_KEY, type="json", value='[{"n": 1}]')

    desired = plan_append(current, {"n": 2})

    assert desired.id == 99
    assert desired.type == "json"
    assert json.loads(desired.value) == [{"n": 1}, {"n": 2}]


def test_plan_append_without_snapshot_creates():
    desired = plan_append(None, {"n": 1})
    assert desired.id is None
    assert json.loads(desired.value) == [{"n": 1}]


def test_event_timestamp_defaults_to_utc_iso():
    event = InteractionEvent(eventType="add_to_cart")
    assert event.timestamp.endswith("Z")
    assert len(event.timestamp) == len("2024-03-01T10:00:00.000Z")


def test_log_entry_omits_empty_fields_but_keeps_customer_id():
    entry = InteractionEvent(eventType="add_to_cart", productId=5, timestamp="2024-03-01T10:00:00.000Z").to_log_entry()

    assert entry == {"eventType": "add_to_cart", "productId": 5, "customerId": None, "timestamp": "2024-03-01T10:00:00.000Z"}


# ---------------------------------------------------------------------------
# append_event
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_append_creates_single_element_log(shopify_service, fake_shopify):
    tracker = InteractionTracker(shopify_service)
    event = _event()

    assert await tracker.append_event(OWNER, event) is True

    # The create branch is awaited: the field exists once append_event returns
    assert _stored_log(fake_shopify) == [event.to_log_entry()]
    assert [r.method for r in fake_shopify.writes] == ["POST"]


@pytest.mark.asyncio
async def test_append_stores_event_without_null_keys(shopify_service, fake_shopify):
    event = InteractionEvent(eventType="wishlist_add", productId=4)

    await InteractionTracker(shopify_service).append_event(OWNER, event)

    stored = _stored_log(fake_shopify)
    assert "visitorId" not in stored[0]
    assert "variantId" not in stored[0]
    assert stored[0]["customerId"] is None
    assert stored[0]["productId"] == 4


@pytest.mark.asyncio
async def test_append_preserves_existing_order(shopify_service, fake_shopify):
    existing = [{"eventType": "wishlist_add", "productId": 1}, {"eventType": "add_to_cart", "productId": 2}]
    fake_shopify.seed_metafield(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY, "json", json.dumps(existing))
    event = _event(product_id=3)

    await InteractionTracker(shopify_service).append_event(OWNER, event)

    assert _stored_log(fake_shopify) == existing + [event.to_log_entry()]
    assert [r.method for r in fake_shopify.writes] == ["PUT"]


@pytest.mark.asyncio
async def test_append_promotes_bare_value(shopify_service, fake_shopify):
    legacy = {"eventType": "add_to_cart", "productId": 1}
    fake_shopify.seed_metafield(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY, "json", json.dumps(legacy))
    event = _event()

    await InteractionTracker(shopify_service).append_event(OWNER, event)

    assert _stored_log(fake_shopify) == [legacy, event.to_log_entry()]


@pytest.mark.asyncio
async def test_append_resets_malformed_log(shopify_service, fake_shopify):
    seeded = fake_shopify.seed_metafield(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY, "json", "[{broken")
    event = _event()

    assert await InteractionTracker(shopify_service).append_event(OWNER, event) is True

    assert _stored_log(fake_shopify) == [event.to_log_entry()]
    assert fake_shopify.writes[0].url.path.endswith(f"/metafields/{seeded['id']}.json")


# ---------------------------------------------------------------------------
# list_interactions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_interactions_newest_first(shopify_service, fake_shopify):
    log = [
        {"eventType": "a", "timestamp": "2024-03-01T10:00:00.000Z"},
        {"eventType": "b", "timestamp": "2024-03-03T10:00:00.000Z"},
        {"eventType": "c"},
        {"eventType": "d", "timestamp": "2024-03-02T10:00:00.000Z"},
    ]
    fake_shopify.seed_metafield(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY, "json", json.dumps(log))

    result = await InteractionTracker(shopify_service).list_interactions(OWNER)

    assert [item["eventType"] for item in result] == ["b", "d", "a", "c"]


@pytest.mark.asyncio
async def test_list_interactions_empty_without_field(shopify_service):
    assert await InteractionTracker(shopify_service).list_interactions(OWNER) == []


@pytest.mark.asyncio
async def test_list_interactions_orders_short_fractions(shopify_service, fake_shopify):
    log = [
        {"eventType": "tenth", "timestamp": "2024-03-01T10:00:00.1Z"},
        {"eventType": "whole", "timestamp": "2024-03-01T10:00:00Z"},
        {"eventType": "micro", "timestamp": "2024-03-01T10:00:00.123456789Z"},
        {"eventType": "later", "timestamp": "2024-03-01T10:00:01.05Z"},
    ]
    fake_shopify.seed_metafield(OWNER, INTERACTIONS_NAMESPACE, INTERACTIONS_KEY, "json", json.dumps(log))

    result = await InteractionTracker(shopify_service).list_interactions(OWNER)

    assert [item["eventType"] for item in result] == ["later", "micro", "tenth", "whole"]
