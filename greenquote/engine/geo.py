from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from pyproj import Geod

SQFT_PER_SQM = 10.7639
METERS_PER_DEG_LAT = 111320.0

ZOOM_PARCEL = 20
ZOOM_NEIGHBORHOOD = 14
ZOOM_DEFAULT = 16


# -----------------------------
# Coordinates
# -----------------------------


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float

    def as_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


Ring = Tuple[LatLng, ...]
RawPoint = Union[LatLng, Dict[str, Any], Sequence[float]]


def coerce_point(raw: RawPoint) -> LatLng:
    """Accepts LatLng, {"lat", "lng"} dicts or (lat, lng) pairs."""
    if isinstance(raw, LatLng):
        return raw
    if isinstance(raw, dict):
        return LatLng(float(raw["lat"]), float(raw["lng"]))
    lat, lng = raw[0], raw[1]
    return LatLng(float(lat), float(lng))


def coerce_ring(raw: Iterable[RawPoint]) -> Ring:
    ring = [coerce_point(p) for p in raw]
    # closed rings from GeoJSON-ish sources repeat the first vertex
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    return tuple(ring)


@dataclass(frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> LatLng:
        return LatLng((self.south + self.north) / 2, (self.west + self.east) / 2)


# -----------------------------
# Place (resolved address)
# -----------------------------


@dataclass(frozen=True)
class AddressComponent:
    long_name: str
    short_name: str = ""
    types: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Place:
    """
    Immutable resolved-address record, produced once per address selection.
    """

    center: Optional[LatLng]
    viewport: Optional[Bounds] = None
    components: Tuple[AddressComponent, ...] = ()
    formatted_address: str = ""

    def component(self, kind: str) -> Optional[AddressComponent]:
        for c in self.components:
            if kind in c.types:
                return c
        return None

    @property
    def route_name(self) -> Optional[str]:
        route = self.component("route")
        return route.long_name if route else None

    @property
    def postal_code(self) -> Optional[str]:
        pc = self.component("postal_code")
        return pc.long_name if pc else None

    @property
    def has_street_number(self) -> bool:
        return self.component("street_number") is not None

    @property
    def has_route(self) -> bool:
        return self.component("route") is not None

    @property
    def is_full_address(self) -> bool:
        return self.has_street_number and self.has_route

    @property
    def zoom_hint(self) -> int:
        if self.is_full_address:
            return ZOOM_PARCEL
        if self.postal_code and not self.has_route:
            return ZOOM_NEIGHBORHOOD
        return ZOOM_DEFAULT

    @classmethod
    def from_google_result(cls, result: Dict[str, Any]) -> "Place":
        """
        Build a Place from a geocoder / places-autocomplete result:
          {"geometry": {"location": {...}, "viewport": {...}},
           "address_components": [...], "formatted_address": "..."}
        Missing geometry gives a Place without a center.
        """
        geometry = result.get("geometry") or {}

        center = None
        loc = geometry.get("location")
        if isinstance(loc, dict) and loc.get("lat") is not None and loc.get("lng") is not None:
            center = LatLng(float(loc["lat"]), float(loc["lng"]))

        viewport = None
        vp = geometry.get("viewport")
        if isinstance(vp, dict) and "northeast" in vp and "southwest" in vp:
            viewport = Bounds(
                south=float(vp["southwest"]["lat"]),
                west=float(vp["southwest"]["lng"]),
                north=float(vp["northeast"]["lat"]),
                east=float(vp["northeast"]["lng"]),
            )

        components = tuple(
            AddressComponent(
                long_name=str(c.get("long_name", "")),
                short_name=str(c.get("short_name", "")),
                types=tuple(c.get("types") or ()),
            )
            for c in result.get("address_components") or []
        )

        return cls(
            center=center,
            viewport=viewport,
            components=components,
            formatted_address=str(result.get("formatted_address", "")),
        )


# -----------------------------
# Mapping collaborator (interfaces)
# -----------------------------


class AreaCalculator(Protocol):
    def geodesic_area_m2(self, ring: Sequence[LatLng]) -> float: ...


class MapCanvas(Protocol):
    def render_polygon(self, ring: Sequence[LatLng], style: Dict[str, Any]) -> Any: ...
    def release(self, handle: Any) -> None: ...
    def fit_view(self, target: Union[Bounds, LatLng], zoom: int) -> None: ...


class AddressResolver(Protocol):
    def resolve(self, text: str) -> Optional[Place]: ...


class GeodAreaCalculator:
    """Geodesic polygon area on the WGS84 ellipsoid."""

    def __init__(self, ellps: str = "WGS84"):
        self._geod = Geod(ellps=ellps)

    def geodesic_area_m2(self, ring: Sequence[LatLng]) -> float:
        if len(ring) < 3:
            return 0.0
        lons = [p.lng for p in ring]
        lats = [p.lat for p in ring]
        area, _perimeter = self._geod.polygon_area_perimeter(lons, lats)
        if not math.isfinite(area):
            return 0.0
        # sign only encodes winding order
        return abs(area)


@dataclass
class NullCanvas:
    """Canvas for server-side sessions: hands out counters, records releases."""

    rendered: Dict[int, Ring] = field(default_factory=dict)
    released: List[int] = field(default_factory=list)
    last_view: Optional[Tuple[Union[Bounds, LatLng], int]] = None
    _next: int = 0

    def render_polygon(self, ring: Sequence[LatLng], style: Dict[str, Any]) -> int:
        self._next += 1
        self.rendered[self._next] = tuple(ring)
        return self._next

    def release(self, handle: Any) -> None:
        self.rendered.pop(handle, None)
        self.released.append(handle)

    def fit_view(self, target: Union[Bounds, LatLng], zoom: int) -> None:
        self.last_view = (target, zoom)


def sqm_to_sqft(sq_meters: float) -> int:
    return int(round(sq_meters * SQFT_PER_SQM))


# -----------------------------
# Rectangle synthesis
# -----------------------------


def _meters_per_deg_lng(lat: float) -> float:
    return METERS_PER_DEG_LAT * math.cos(math.radians(lat))


def offset(center: LatLng, bearing_deg: float, meters: float) -> LatLng:
    """Move `meters` from center along a compass bearing (0 = north, 90 = east)."""
    rad = math.radians(bearing_deg)
    d_north = math.cos(rad) * meters
    d_east = math.sin(rad) * meters
    return LatLng(
        center.lat + d_north / METERS_PER_DEG_LAT,
        center.lng + d_east / _meters_per_deg_lng(center.lat),
    )


def rotate(dx: float, dy: float, bearing_deg: float) -> Tuple[float, float]:
    """Rotate a local (east, north) offset clockwise by a compass bearing."""
    rad = math.radians(bearing_deg)
    cos, sin = math.cos(rad), math.sin(rad)
    return dx * cos + dy * sin, -dx * sin + dy * cos


def rectangle_ring(
    center: LatLng,
    sqft_target: float,
    aspect_ratio: float,
    bearing_deg: float = 0.0,
) -> Ring:
    """
    Rectangle of roughly `sqft_target` around center.

    Depth runs north-south before rotation, width = depth * aspect_ratio.
    After rotating by the bearing, the depth axis points at the bearing,
    so a bearing toward the road makes the long side face the street.
    """
    sq_meters = max(float(sqft_target), 0.0) / SQFT_PER_SQM
    depth = math.sqrt(sq_meters / aspect_ratio)
    width = depth * aspect_ratio

    half_w, half_d = width / 2, depth / 2
    corners = [(-half_w, -half_d), (half_w, -half_d), (half_w, half_d), (-half_w, half_d)]

    m_lng = _meters_per_deg_lng(center.lat)
    ring: List[LatLng] = []
    for dx, dy in corners:
        east, north = rotate(dx, dy, bearing_deg)
        ring.append(LatLng(center.lat + north / METERS_PER_DEG_LAT, center.lng + east / m_lng))
    return tuple(ring)


def rectangle_depth_m(sqft_target: float, aspect_ratio: float) -> float:
    return math.sqrt((max(float(sqft_target), 0.0) / SQFT_PER_SQM) / aspect_ratio)
