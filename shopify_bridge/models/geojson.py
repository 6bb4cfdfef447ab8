# shopify_bridge/models/geojson.py
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional, Tuple


class Point(BaseModel):
    type: Literal["Point"] = "Point"
    # GeoJSON: [долгота, широта]
    coordinates: Tuple[float, float]


class Feature(BaseModel):
    type: Literal["Feature"] = "Feature"
    id: Optional[str] = None
    geometry: Optional[Point] = None
    properties: Dict[str, Any] = {}


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[Feature] = []
