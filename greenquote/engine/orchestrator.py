from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence
from uuid import uuid4

from greenquote.core.logging_config import logger
from greenquote.core.settings import settings
from greenquote.schemas.pricing import PricingConfig
from greenquote.schemas.quote import QuoteRecordCreate

from .estimator import AutoEstimator, EstimateResult, EstimatorSettings, PropertyType, baseline_area
from .geo import AddressResolver, AreaCalculator, MapCanvas, Place, RawPoint
from .quote_pricing import QuotePrice, QuoteSelection, price_quote
from .service_area import AreaChange, ServiceArea, ServicePolygon


class QuoteState(StrEnum):
    NO_ADDRESS = "no_address"
    ADDRESS_NOT_FOUND = "address_not_found"
    ESTIMATING = "estimating"
    ESTIMATED = "estimated"
    EDITED = "edited"


class AreaSource(StrEnum):
    MEASURED = "measured"
    ESTIMATED = "estimated"
    NONE = "none"


@dataclass(frozen=True)
class AreaEvent:
    total_sqft: int
    polygon_count: int
    auto: bool = False


AreaEventListener = Callable[[AreaEvent], None]
Scheduler = Callable[[float, Callable[[], None]], Any]


def run_immediately(delay_s: float, fn: Callable[[], None]) -> None:
    fn()


class QuoteSession:
    """
    Mutable state of one in-progress quote.

    address -> auto-estimate -> area edits -> re-price, one direction per
    action. Manual polygon edits are never overwritten by a later address
    change; a property type change does discard them.

    `scheduler(delay_s, fn)` runs the estimation after the "detecting..."
    pause. `asyncio.get_running_loop().call_later` fits directly; the
    default runs it at once, and results are identical either way.
    """

    def __init__(
        self,
        pricing_config: Optional[PricingConfig] = None,
        *,
        area_calculator: Optional[AreaCalculator] = None,
        canvas: Optional[MapCanvas] = None,
        resolver: Optional[AddressResolver] = None,
        estimator_settings: Optional[EstimatorSettings] = None,
        scheduler: Optional[Scheduler] = None,
        estimate_delay_s: Optional[float] = None,
        property_type: PropertyType = PropertyType.RESIDENTIAL,
        quote_id: Optional[str] = None,
    ):
        self.quote_id = quote_id or uuid4().hex
        self.pricing_config = pricing_config or PricingConfig()
        self.resolver = resolver
        self.scheduler: Scheduler = scheduler or run_immediately
        if estimate_delay_s is None:
            estimate_delay_s = settings.AUTO_ESTIMATE_DELAY_MS / 1000
        self.estimate_delay_s = estimate_delay_s

        self.area = ServiceArea(area_calculator=area_calculator, canvas=canvas)
        self.area.subscribe(self._on_area_change)
        self.estimator = AutoEstimator(
            self.area, estimator_settings, on_auto_created=self._on_auto_created
        )

        self.state = QuoteState.NO_ADDRESS
        self.area_source = AreaSource.NONE
        self.place: Optional[Place] = None
        self.property_type = PropertyType(property_type)
        self.selection = QuoteSelection()
        self.fallback_area_sqft = 0
        self.last_estimate: Optional[EstimateResult] = None

        self.area_listeners: List[AreaEventListener] = []
        self.auto_listeners: List[AreaEventListener] = []

        self._generation = 0
        self._auto_populating = False
        self._log = logger.bind(quote_id=self.quote_id)
        self._price = self._compute_price()

    # -----------------------------
    # Subscriptions (UI side)
    # -----------------------------

    def on_area_changed(self, listener: AreaEventListener) -> None:
        self.area_listeners.append(listener)

    def on_auto_estimated(self, listener: AreaEventListener) -> None:
        self.auto_listeners.append(listener)

    # -----------------------------
    # Reads
    # -----------------------------

    @property
    def area_sqft(self) -> int:
        if self.area.polygon_count:
            return self.area.total_sqft
        return self.fallback_area_sqft

    @property
    def polygon_count(self) -> int:
        return self.area.polygon_count

    @property
    def current_price(self) -> QuotePrice:
        return self._price

    def get_current_price(self) -> QuotePrice:
        return self._price

    @property
    def default_areas(self) -> Dict[str, Any]:
        return self.pricing_config.default_areas.model_dump()

    # -----------------------------
    # Address / classification
    # -----------------------------

    def resolve_address(self, text: str) -> Optional[Place]:
        if self.resolver is None:
            raise RuntimeError("QuoteSession has no address resolver")
        place = self.resolver.resolve(text)
        self.select_address(place)
        return place

    def select_address(self, place: Optional[Place]) -> None:
        if place is None:
            self._log.info("address_not_found", state=str(self.state))
            if self.state == QuoteState.EDITED:
                return
            self._generation += 1
            self.place = None
            self._reset_area()
            self.state = QuoteState.ADDRESS_NOT_FOUND
            self._reprice()
            self._emit(self.area_listeners, AreaEvent(self.area_sqft, self.polygon_count))
            return

        self.place = place
        target = place.viewport or place.center
        if target is not None:
            self.area.canvas.fit_view(target, place.zoom_hint)

        if self.state == QuoteState.EDITED:
            self._log.info("address_changed_manual_area_kept", polygons=self.polygon_count)
            return

        self._start_estimation()

    def set_property_type(self, property_type: PropertyType) -> None:
        property_type = PropertyType(property_type)
        if property_type == self.property_type:
            return

        self.property_type = property_type
        if self.place is None:
            self._reprice()
            return

        if self.state == QuoteState.EDITED:
            self._log.info(
                "manual_area_discarded", property_type=str(property_type), polygons=self.polygon_count
            )
        self._start_estimation()

    # -----------------------------
    # User polygon edits
    # -----------------------------

    def add_polygon(self, ring: Iterable[RawPoint]) -> ServicePolygon:
        return self.area.add_polygon(ring)

    def update_polygon(self, polygon_id: str, ring: Iterable[RawPoint]) -> ServicePolygon:
        return self.area.update_polygon(polygon_id, ring)

    def remove_polygon(self, polygon_id: str) -> None:
        self.area.remove_polygon(polygon_id)

    def clear_polygons(self) -> None:
        self.area.clear_all()

    # -----------------------------
    # Service selection / pricing config
    # -----------------------------

    def update_selection(
        self,
        *,
        service: Optional[str] = None,
        add_on_ids: Optional[Sequence[str]] = None,
        frequency: Optional[str] = None,
    ) -> QuotePrice:
        changes: Dict[str, Any] = {}
        if service is not None:
            changes["service"] = service
        if add_on_ids is not None:
            changes["add_on_ids"] = tuple(add_on_ids)
        if frequency is not None:
            changes["frequency"] = frequency
        self.selection = replace(self.selection, **changes)
        return self._reprice()

    def set_pricing_config(self, config: PricingConfig) -> QuotePrice:
        self.pricing_config = config
        return self._reprice()

    # -----------------------------
    # Persistence snapshot
    # -----------------------------

    def to_quote_record(self, account_id: str, **customer: Any) -> QuoteRecordCreate:
        price = self._price
        return QuoteRecordCreate(
            account_id=account_id,
            property_address=self.place.formatted_address if self.place else None,
            property_type=str(self.property_type),
            area_sq_ft=self.area_sqft,
            area_source=str(self.area_source),
            polygons=self.area.snapshot_coordinates(),
            pricing_mode=str(price.pricing_mode),
            pricing_tiers_snapshot=price.tiers_snapshot,
            flat_rate_snapshot=price.flat_rate_snapshot,
            service=self.selection.service,
            add_ons=price.add_ons,
            frequency=self.selection.frequency,
            base_price_per_visit=price.base_price,
            total_price_per_visit=price.per_visit,
            monthly_estimate=price.monthly,
            **customer,
        )

    # -----------------------------
    # Internals
    # -----------------------------

    @contextmanager
    def _auto(self) -> Iterator[None]:
        self._auto_populating = True
        try:
            yield
        finally:
            self._auto_populating = False

    def _start_estimation(self) -> None:
        self._generation += 1
        generation = self._generation
        self.state = QuoteState.ESTIMATING
        self._log.info("estimation_scheduled", generation=generation, delay_s=self.estimate_delay_s)
        self.scheduler(self.estimate_delay_s, lambda: self._run_estimation(generation))

    def _run_estimation(self, generation: int) -> None:
        # a newer address / type selection or a manual edit supersedes this run
        if generation != self._generation or self.state != QuoteState.ESTIMATING:
            self._log.debug("estimation_superseded", generation=generation)
            return

        with self._auto():
            result = self.estimator.estimate(self.place, self.property_type, self.default_areas)

        if result is not None:
            return

        # no coordinate: flat numeric estimate without polygons
        self._reset_area()
        self.fallback_area_sqft = baseline_area(self.default_areas, self.property_type, self.place)
        self.area_source = AreaSource.ESTIMATED
        self.state = QuoteState.ESTIMATED
        self._reprice()
        event = AreaEvent(self.fallback_area_sqft, 0, auto=True)
        self._emit(self.area_listeners, event)
        self._emit(self.auto_listeners, event)

    def _reset_area(self) -> None:
        with self._auto():
            self.area.clear_all()
        self.fallback_area_sqft = 0
        self.area_source = AreaSource.NONE
        self.last_estimate = None

    def _on_auto_created(self, result: EstimateResult) -> None:
        self.last_estimate = result
        self.fallback_area_sqft = 0
        self.area_source = AreaSource.ESTIMATED
        self.state = QuoteState.ESTIMATED
        self._reprice()
        event = AreaEvent(result.total_sqft, result.polygon_count, auto=True)
        self._emit(self.area_listeners, event)
        self._emit(self.auto_listeners, event)

    def _on_area_change(self, change: AreaChange) -> None:
        if self._auto_populating:
            return
        # pending auto-estimates must not clobber manual work
        self._generation += 1
        if change.polygon_count:
            self.state = QuoteState.EDITED
            self.fallback_area_sqft = 0
            self.area_source = AreaSource.MEASURED
        else:
            self._fall_back_to_address_estimate()
        self._reprice()
        self._emit(self.area_listeners, AreaEvent(self.area_sqft, change.polygon_count, auto=False))

    def _fall_back_to_address_estimate(self) -> None:
        # boundary cleared: nothing manual left to protect
        if self.place is None:
            self.state = QuoteState.NO_ADDRESS
            self.fallback_area_sqft = 0
            self.area_source = AreaSource.NONE
            return
        self.state = QuoteState.ESTIMATED
        self.fallback_area_sqft = baseline_area(self.default_areas, self.property_type, self.place)
        self.area_source = AreaSource.ESTIMATED
        self._log.info("boundary_cleared_estimate_restored", area_sqft=self.fallback_area_sqft)

    def _compute_price(self) -> QuotePrice:
        return price_quote(self.area_sqft, self.pricing_config, self.selection)

    def _reprice(self) -> QuotePrice:
        self._price = self._compute_price()
        return self._price

    @staticmethod
    def _emit(listeners: List[AreaEventListener], event: AreaEvent) -> None:
        for listener in list(listeners):
            listener(event)
