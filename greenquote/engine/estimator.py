from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Dict, List, Mapping, Optional

from greenquote.core.logging_config import logger

from .geo import LatLng, Place, Ring, offset, rectangle_depth_m, rectangle_ring
from .service_area import ServiceArea


class PropertyType(StrEnum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"


class Layout(StrEnum):
    SINGLE = "single"
    FRONT_BACK = "front_back"


FALLBACK_AREAS: Dict[str, int] = {
    PropertyType.RESIDENTIAL: 8000,
    PropertyType.COMMERCIAL: 15000,
}


@dataclass(frozen=True)
class EstimatorSettings:
    multi_polygon_threshold_sqft: int = 5000
    front_share: float = 0.3
    back_share: float = 0.7
    single_aspect_ratio: float = 1.3
    front_aspect_ratio: float = 2.5  # wide and shallow along the street
    back_aspect_ratio: float = 1.2
    house_depth_m: float = 12.0  # gap between the yards
    default_road_direction: float = 180.0  # road to the south

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "EstimatorSettings":
        if not raw:
            return cls()
        known = {k: raw[k] for k in cls.__dataclass_fields__ if k in raw}
        return cls(**known)


@dataclass(frozen=True)
class EstimateResult:
    total_sqft: int
    polygon_count: int
    target_sqft: int
    layout: Layout
    road_direction: float
    center: LatLng
    polygon_ids: List[str] = field(default_factory=list)


# -----------------------------
# Heuristics
# -----------------------------

_DIRECTION_BEARINGS: Dict[str, float] = {
    "n": 0, "north": 0,
    "ne": 45, "northeast": 45,
    "e": 90, "east": 90,
    "se": 135, "southeast": 135,
    "s": 180, "south": 180,
    "sw": 225, "southwest": 225,
    "w": 270, "west": 270,
    "nw": 315, "northwest": 315,
}

_TOKEN_SPLIT = re.compile(r"[\s.,]+")


def _edge_bearings(name: str) -> set[float]:
    tokens = [t for t in _TOKEN_SPLIT.split(name.lower()) if t]
    if len(tokens) < 2:
        # a bare "North" is the street name itself, not a direction
        return set()
    found = set()
    for token in (tokens[0], tokens[-1]):
        if token in _DIRECTION_BEARINGS:
            found.add(float(_DIRECTION_BEARINGS[token]))
    return found


def detect_road_direction(place: Optional[Place], default: float = 180.0) -> float:
    """
    Best-effort compass bearing from the lot toward its street.

    Reads a directional prefix/suffix token out of the route name
    ("N Main St", "Oak Ave SW"). This is a hint only: no token, or
    tokens that contradict each other, give the default bearing.
    """
    if place is None:
        return default
    route = place.component("route")
    if route is None:
        return default

    bearings: set[float] = set()
    for name in (route.long_name, route.short_name):
        if name:
            bearings |= _edge_bearings(name)

    if len(bearings) != 1:
        return default
    bearing = bearings.pop()
    if not math.isfinite(bearing) or not 0 <= bearing < 360:
        return default
    return bearing


def baseline_area(
    default_areas: Optional[Mapping[str, Any]],
    property_type: PropertyType,
    place: Optional[Place] = None,
) -> int:
    """Postal code override first, then the per-classification default."""
    defaults = default_areas or {}
    overrides = defaults.get("zip_overrides") or {}
    postal = place.postal_code if place else None
    if postal and overrides.get(postal):
        return int(overrides[postal])
    value = defaults.get(str(property_type)) or FALLBACK_AREAS[PropertyType(property_type)]
    return int(value)


def choose_layout(
    property_type: PropertyType, target_sqft: float, settings: EstimatorSettings
) -> Layout:
    if property_type == PropertyType.RESIDENTIAL and target_sqft > settings.multi_polygon_threshold_sqft:
        return Layout.FRONT_BACK
    return Layout.SINGLE


def front_back_rings(
    center: LatLng, target_sqft: float, road_direction: float, settings: EstimatorSettings
) -> List[Ring]:
    front_sqft = round(target_sqft * settings.front_share)
    back_sqft = round(target_sqft * settings.back_share)

    front_depth = rectangle_depth_m(front_sqft, settings.front_aspect_ratio)
    back_depth = rectangle_depth_m(back_sqft, settings.back_aspect_ratio)
    gap = settings.house_depth_m / 2

    # front yard toward the road, back yard away from it
    front_center = offset(center, road_direction, gap + front_depth / 2)
    back_center = offset(center, road_direction + 180, gap + back_depth / 2)

    return [
        rectangle_ring(front_center, front_sqft, settings.front_aspect_ratio, road_direction),
        rectangle_ring(back_center, back_sqft, settings.back_aspect_ratio, road_direction),
    ]


# -----------------------------
# Estimator
# -----------------------------


class AutoEstimator:
    """
    Synthesizes an initial lawn polygon set for a resolved place.

    The generated rectangles are only sized from the target area; the
    reported area is whatever the service area measures for them.
    """

    def __init__(
        self,
        area: ServiceArea,
        settings: Optional[EstimatorSettings] = None,
        on_auto_created: Optional[Callable[[EstimateResult], None]] = None,
    ):
        self.area = area
        self.settings = settings or EstimatorSettings()
        self.on_auto_created = on_auto_created

    def estimate(
        self,
        place: Optional[Place],
        property_type: PropertyType,
        default_areas: Optional[Mapping[str, Any]] = None,
    ) -> Optional[EstimateResult]:
        if place is None or place.center is None:
            logger.info("auto_estimate_skipped", reason="no_center")
            return None

        property_type = PropertyType(property_type)
        center = place.center
        target = baseline_area(default_areas, property_type, place)
        road_direction = detect_road_direction(place, self.settings.default_road_direction)
        layout = choose_layout(property_type, target, self.settings)

        if layout == Layout.FRONT_BACK:
            rings = front_back_rings(center, target, road_direction, self.settings)
        else:
            rings = [rectangle_ring(center, target, self.settings.single_aspect_ratio, road_direction)]

        self.area.clear_all()
        polygon_ids = [self.area.add_polygon(ring).id for ring in rings]

        result = EstimateResult(
            total_sqft=self.area.total_sqft,
            polygon_count=self.area.polygon_count,
            target_sqft=target,
            layout=layout,
            road_direction=road_direction,
            center=center,
            polygon_ids=polygon_ids,
        )
        logger.info(
            "auto_estimated",
            property_type=str(property_type),
            layout=str(layout),
            target_sqft=target,
            total_sqft=result.total_sqft,
            polygons=result.polygon_count,
            road_direction=road_direction,
        )

        if self.on_auto_created is not None:
            self.on_auto_created(result)
        return result
