from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional
from uuid import uuid4

from greenquote.core.errors import PolygonNotFound

from .geo import (
    AreaCalculator,
    GeodAreaCalculator,
    MapCanvas,
    NullCanvas,
    RawPoint,
    Ring,
    coerce_ring,
    sqm_to_sqft,
)

DEFAULT_POLYGON_STYLE: Dict[str, Any] = {
    "fill_color": "#16a34a",
    "fill_opacity": 0.35,
    "stroke_weight": 3,
    "stroke_color": "#166534",
    "editable": True,
    "draggable": False,
}


@dataclass
class ServicePolygon:
    id: str
    ring: Ring
    handle: Any
    sq_meters: float
    area_sqft: int


@dataclass(frozen=True)
class AreaChange:
    total_sqft: int
    polygon_count: int
    breakdown: List[Dict[str, Any]] = field(default_factory=list)


AreaListener = Callable[[AreaChange], None]


class ServiceArea:
    """
    Set of independently editable lawn polygons for one quote.

    Every mutation recomputes the cached total from the members and
    notifies the area listener exactly once.
    """

    def __init__(
        self,
        area_calculator: Optional[AreaCalculator] = None,
        canvas: Optional[MapCanvas] = None,
        style: Optional[Dict[str, Any]] = None,
    ):
        self.area_calculator = area_calculator or GeodAreaCalculator()
        self.canvas = canvas or NullCanvas()
        self.style = {**DEFAULT_POLYGON_STYLE, **(style or {})}
        self._polygons: List[ServicePolygon] = []
        self._total_sqft = 0
        self._listener: Optional[AreaListener] = None

    # -----------------------------
    # Subscription
    # -----------------------------

    def subscribe(self, listener: Optional[AreaListener]) -> None:
        """Single 'area changed' subscription point; a new listener replaces the old one."""
        self._listener = listener

    # -----------------------------
    # Reads
    # -----------------------------

    @property
    def polygons(self) -> List[ServicePolygon]:
        return list(self._polygons)

    @property
    def polygon_count(self) -> int:
        return len(self._polygons)

    @property
    def total_sqft(self) -> int:
        return self._total_sqft

    def get_total_area_sqft(self) -> int:
        return self._total_sqft

    def get(self, polygon_id: str) -> ServicePolygon:
        for p in self._polygons:
            if p.id == polygon_id:
                return p
        raise PolygonNotFound(polygon_id)

    def snapshot_coordinates(self) -> List[List[Dict[str, float]]]:
        return [[pt.as_dict() for pt in p.ring] for p in self._polygons]

    # -----------------------------
    # Mutations
    # -----------------------------

    def add_polygon(self, ring: Iterable[RawPoint]) -> ServicePolygon:
        coords = coerce_ring(ring)
        sq_meters = self._measure(coords)
        polygon = ServicePolygon(
            id=uuid4().hex,
            ring=coords,
            handle=self.canvas.render_polygon(coords, self.style),
            sq_meters=sq_meters,
            area_sqft=sqm_to_sqft(sq_meters),
        )
        self._polygons.append(polygon)
        self._recalculate()
        return polygon

    def update_polygon(self, polygon_id: str, ring: Iterable[RawPoint]) -> ServicePolygon:
        polygon = self.get(polygon_id)
        polygon.ring = coerce_ring(ring)
        polygon.sq_meters = self._measure(polygon.ring)
        polygon.area_sqft = sqm_to_sqft(polygon.sq_meters)
        self._recalculate()
        return polygon

    def remove_polygon(self, polygon_id: str) -> None:
        polygon = self.get(polygon_id)
        self._polygons.remove(polygon)
        self.canvas.release(polygon.handle)
        self._recalculate()

    def clear_all(self) -> None:
        for polygon in self._polygons:
            self.canvas.release(polygon.handle)
        self._polygons = []
        self._recalculate()

    # -----------------------------
    # Internals
    # -----------------------------

    def _measure(self, ring: Ring) -> float:
        sq_meters = float(self.area_calculator.geodesic_area_m2(ring))
        # NaN and negative areas count as zero
        return sq_meters if sq_meters > 0 else 0.0

    def _recalculate(self) -> None:
        self._total_sqft = sum(p.area_sqft for p in self._polygons)
        if self._listener is None:
            return
        breakdown = [
            {"id": p.id, "index": i, "sq_meters": p.sq_meters, "sqft": p.area_sqft}
            for i, p in enumerate(self._polygons)
        ]
        self._listener(AreaChange(self._total_sqft, len(self._polygons), breakdown))

