# shopify_bridge/services/spas.py
import logging
import math
from typing import Any, Dict, List, Optional, Union

from shopify_bridge.models.geojson import Feature, FeatureCollection, Point
from shopify_bridge.services.shopify import ShopifyService

logger = logging.getLogger(__name__)

METAOBJECT_GID_PREFIX = "gid://shopify/Metaobject/"

LATITUDE_KEYS = ("latitude", "lat")
LONGITUDE_KEYS = ("longitude", "lng", "lon")

SPA_DETAILS_QUERY = """
query getSpaDetails($id: ID!) {
  metaobject(id: $id) {
    id
    handle
    fields {
      key
      value
    }
  }
}
"""

LIST_METAOBJECTS_QUERY = """
query listMetaobjects($type: String!, $first: Int!, $after: String) {
  metaobjects(type: $type, first: $first, after: $after) {
    nodes {
      id
      handle
      fields {
        key
        value
      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""


def to_metaobject_gid(spa_id: Union[int, str]) -> str:
    spa_id = str(spa_id)
    if spa_id.startswith(METAOBJECT_GID_PREFIX):
        return spa_id
    return f"{METAOBJECT_GID_PREFIX}{spa_id}"


def strip_metaobject_gid(gid: str) -> str:
    return gid.replace(METAOBJECT_GID_PREFIX, '')


def flatten_metaobject(node: Dict[str, Any], spa_id: Optional[str] = None) -> Dict[str, Any]:
    """Превращает {id, handle, fields: [{key, value}]} в плоский словарь."""
    record: Dict[str, Any] = {
        "id": spa_id if spa_id is not None else strip_metaobject_gid(node.get('id') or ''),
        "handle": node.get('handle'),
    }
    for field in node.get('fields') or []:
        record[field['key']] = field.get('value')
    return record


def _first_float(record: Dict[str, Any], keys, limit: float) -> Optional[float]:
    """Первое пригодное значение среди синонимов поля; NaN, бесконечность и выход за limit отбрасываются."""
    for key in keys:
        value = record.get(key)
        if value in (None, ''):
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None
        if number is None or not math.isfinite(number) or abs(number) > limit:
            logger.warning(f"Invalid coordinate '{value}' in field '{key}' of spa {record.get('id')}")
            continue
        return number
    return None


def to_feature(record: Dict[str, Any]) -> Feature:
    lat = _first_float(record, LATITUDE_KEYS, 90.0)
    lng = _first_float(record, LONGITUDE_KEYS, 180.0)
    geometry = Point(coordinates=(lng, lat)) if lat is not None and lng is not None else None
    if geometry is None:
        logger.debug(f"Spa {record.get('id')} has no coordinates, geometry left empty")
    return Feature(id=str(record.get('id')), geometry=geometry, properties=record)


class SpaDirectory:
    """Спа-центры как метаобъекты Shopify: детали, полный список, GeoJSON."""

    def __init__(self, shopify: ShopifyService, metaobject_type: str = "spa", page_size: int = 50):
        self.shopify = shopify
        self.metaobject_type = metaobject_type
        self.page_size = page_size

    async def get_spa(self, spa_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        """Детали спа по id или None, если метаобъект не найден."""
        logger.info(f"Fetching spa details for {spa_id}")
        data = await self.shopify.graphql(SPA_DETAILS_QUERY, {"id": to_metaobject_gid(spa_id)})
        metaobject = data.get('metaobject')
        if not metaobject:
            logger.info(f"Spa {spa_id} not found")
            return None
        return flatten_metaobject(metaobject, spa_id=strip_metaobject_gid(str(spa_id)))

    async def list_metaobjects(self, metaobject_type: str, page_size: int) -> List[Dict[str, Any]]:
        """
        Собирает все метаобъекты типа, проходя страницы по курсору.
        Каждый следующий запрос несет endCursor предыдущего ответа,
        цикл заканчивается на странице с hasNextPage = false.
        """
        nodes: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        page = 0
        while True:
            page += 1
            variables = {"type": metaobject_type, "first": page_size, "after": cursor}
            data = await self.shopify.graphql(LIST_METAOBJECTS_QUERY, variables)
            connection = data.get('metaobjects') or {}
            page_nodes = connection.get('nodes') or []
            nodes.extend(page_nodes)
            page_info = connection.get('pageInfo') or {}
            logger.debug(f"Fetched page {page} of '{metaobject_type}' metaobjects: {len(page_nodes)} nodes")
            if not page_info.get('hasNextPage'):
                break
            cursor = page_info.get('endCursor')
            if not cursor:
                logger.warning(f"hasNextPage without endCursor on page {page} of '{metaobject_type}', stopping")
                break
        logger.info(f"Fetched {len(nodes)} '{metaobject_type}' metaobjects in {page} page(s)")
        return nodes

    async def list_spas(self) -> List[Dict[str, Any]]:
        nodes = await self.list_metaobjects(self.metaobject_type, self.page_size)
        return [flatten_metaobject(node) for node in nodes]

    async def list_spas_geojson(self) -> FeatureCollection:
        records = await self.list_spas()
        return FeatureCollection(features=[to_feature(record) for record in records])
