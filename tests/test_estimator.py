import math

import pytest

from greenquote.engine.estimator import (
    AutoEstimator,
    EstimatorSettings,
    Layout,
    PropertyType,
    baseline_area,
    choose_layout,
    detect_road_direction,
)
from greenquote.engine.geo import LatLng, rectangle_ring
from greenquote.engine.service_area import ServiceArea

from .helpers import make_place

DEFAULT_AREAS = {"residential": 8000, "commercial": 15000, "zip_overrides": {}}


@pytest.fixture
def area(canvas):
    # real geodesic measurement
    return ServiceArea(canvas=canvas)


def test_residential_above_threshold_gets_front_and_back(area, place):
    result = AutoEstimator(area).estimate(place, PropertyType.RESIDENTIAL, DEFAULT_AREAS)

    assert result.layout == Layout.FRONT_BACK
    assert result.polygon_count == 2
    assert area.polygon_count == 2
    assert result.target_sqft == 8000
    assert math.isclose(result.total_sqft, 8000, rel_tol=0.02)
    assert result.total_sqft == area.total_sqft


def test_front_yard_is_smaller_than_back_yard(area, place):
    AutoEstimator(area).estimate(place, PropertyType.RESIDENTIAL, DEFAULT_AREAS)
    front, back = area.polygons

    assert math.isclose(front.area_sqft, 2400, rel_tol=0.02)
    assert math.isclose(back.area_sqft, 5600, rel_tol=0.02)


def test_yards_sit_on_opposite_sides_of_the_house(area):
    # road to the south (default): front yard south of center, back yard north
    place = make_place(route="Maple Ave")
    AutoEstimator(area).estimate(place, PropertyType.RESIDENTIAL, DEFAULT_AREAS)
    front, back = area.polygons

    assert max(p.lat for p in front.ring) < place.center.lat
    assert min(p.lat for p in back.ring) > place.center.lat


def test_commercial_is_one_polygon(area, place):
    result = AutoEstimator(area).estimate(place, PropertyType.COMMERCIAL, DEFAULT_AREAS)

    assert result.layout == Layout.SINGLE
    assert result.polygon_count == 1
    assert math.isclose(result.total_sqft, 15000, rel_tol=0.02)


def test_small_residential_lot_is_one_polygon(area):
    place = make_place(postal_code="10001")
    areas = {**DEFAULT_AREAS, "zip_overrides": {"10001": 4000}}

    result = AutoEstimator(area).estimate(place, PropertyType.RESIDENTIAL, areas)

    assert result.target_sqft == 4000
    assert result.layout == Layout.SINGLE
    assert math.isclose(result.total_sqft, 4000, rel_tol=0.02)


def test_threshold_is_exclusive():
    s = EstimatorSettings()
    assert choose_layout(PropertyType.RESIDENTIAL, 5000, s) == Layout.SINGLE
    assert choose_layout(PropertyType.RESIDENTIAL, 5001, s) == Layout.FRONT_BACK
    assert choose_layout(PropertyType.COMMERCIAL, 50000, s) == Layout.SINGLE


def test_no_center_returns_none_and_leaves_area_alone(area):
    area.add_polygon(rectangle_ring(LatLng(40.0, -75.0), 3000, 1.3))
    before = area.total_sqft

    result = AutoEstimator(area).estimate(
        make_place(with_center=False), PropertyType.RESIDENTIAL, DEFAULT_AREAS
    )

    assert result is None
    assert area.total_sqft == before
    assert AutoEstimator(area).estimate(None, PropertyType.RESIDENTIAL) is None


def test_estimate_replaces_previous_polygons(area, place):
    est = AutoEstimator(area)
    est.estimate(place, PropertyType.RESIDENTIAL, DEFAULT_AREAS)
    est.estimate(place, PropertyType.COMMERCIAL, DEFAULT_AREAS)
    assert area.polygon_count == 1


def test_callback_receives_result(area, place):
    seen = []
    result = AutoEstimator(area, on_auto_created=seen.append).estimate(
        place, PropertyType.RESIDENTIAL, DEFAULT_AREAS
    )
    assert seen == [result]


def test_rectangle_ring_hits_target_area(canvas):
    area = ServiceArea(canvas=canvas)
    for bearing in (0, 45, 90, 180, 270):
        area.clear_all()
        area.add_polygon(rectangle_ring(LatLng(40.0, -75.0), 10000, 1.5, bearing))
        assert math.isclose(area.total_sqft, 10000, rel_tol=0.02)


@pytest.mark.parametrize(
    "route, short, expected",
    [
        ("North Main Street", "N Main St", 0.0),
        ("Oak Avenue Southwest", "Oak Ave SW", 225.0),
        ("East Elm Road", "E Elm Rd", 90.0),
        ("Maple Avenue", "Maple Ave", 180.0),
        ("North", "North", 180.0),  # the street name itself
        ("North Main Street East", "N Main St E", 180.0),  # contradictory
        ("Westfield Road", "Westfield Rd", 180.0),
    ],
)
def test_road_direction_from_route_name(route, short, expected):
    place = make_place(route=route, route_short=short)
    assert detect_road_direction(place) == expected


def test_road_direction_defaults():
    assert detect_road_direction(None) == 180.0
    assert detect_road_direction(make_place(route=None), default=90.0) == 90.0


def test_baseline_area_prefers_zip_override():
    areas = {**DEFAULT_AREAS, "zip_overrides": {"19103": 6500}}
    assert baseline_area(areas, PropertyType.RESIDENTIAL, make_place(postal_code="19103")) == 6500
    assert baseline_area(areas, PropertyType.COMMERCIAL, make_place(postal_code="19103")) == 6500
    assert baseline_area(areas, PropertyType.RESIDENTIAL, make_place(postal_code="90210")) == 8000
    assert baseline_area(None, PropertyType.COMMERCIAL) == 15000


def test_settings_from_dict_ignores_unknown_keys():
    s = EstimatorSettings.from_dict({"front_share": 0.4, "back_share": 0.6, "colour": "green"})
    assert s.front_share == 0.4
    assert s.back_share == 0.6
    assert s.house_depth_m == 12.0
