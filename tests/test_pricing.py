import pytest

from greenquote.engine.pricing import (
    DEFAULT_PRICING_TIERS,
    PricingTier,
    compare_pricing,
    effective_rate,
    price_area,
    price_area_flat,
    price_flat,
    sort_tiers,
    validate_pricing_tiers,
)

DEFAULT_DICTS = [t.as_dict() for t in DEFAULT_PRICING_TIERS]


@pytest.mark.parametrize(
    "sqft, expected",
    [
        (2500, 30.0),
        (5000, 60.0),
        (10000, 100.0),
        (25000, 205.0),
        (40000, 280.0),
    ],
)
def test_default_schedule_brackets(sqft, expected):
    assert price_area(sqft, DEFAULT_PRICING_TIERS).total_price == expected


def test_breakdown_lines_describe_each_band():
    result = price_area(25000, DEFAULT_DICTS)

    assert [b.sqft_in_tier for b in result.breakdown] == [5000, 15000, 5000]
    assert [b.rate for b in result.breakdown] == [0.012, 0.008, 0.005]
    assert result.breakdown[0].label == "0-5,000 sq ft"
    assert result.breakdown[-1].label == "20,000+ sq ft"
    assert result.breakdown[-1].range_end is None
    assert sum(b.sqft_in_tier for b in result.breakdown) == 25000


def test_unsorted_schedule_prices_the_same():
    shuffled = [DEFAULT_DICTS[2], DEFAULT_DICTS[0], DEFAULT_DICTS[1]]
    assert price_area(25000, shuffled) == price_area(25000, DEFAULT_DICTS)
    assert sort_tiers(shuffled)[-1].up_to_sqft is None


@pytest.mark.parametrize("sqft", [0, -10, None])
def test_empty_area_prices_zero(sqft):
    result = price_area(sqft, DEFAULT_DICTS)
    assert result.total_price == 0
    assert result.breakdown == []


def test_flat_rate_matches_first_tier_below_its_ceiling():
    for sqft in (1, 777, 2500, 4999, 5000):
        assert price_area(sqft, DEFAULT_DICTS).total_price == price_flat(sqft, 0.012)


def test_single_unbounded_tier_matches_flat():
    for sqft in (1, 999, 12345, 80000):
        tiered = price_area(sqft, [{"up_to_sqft": None, "rate_per_sqft": 0.01}])
        assert tiered.total_price == price_flat(sqft, 0.01)


def test_price_is_monotonic_in_area():
    previous = -1.0
    for sqft in range(0, 60001, 250):
        price = price_area(sqft, DEFAULT_DICTS).total_price
        assert price >= previous
        previous = price


def test_marginal_rate_never_increases():
    tiers = sort_tiers(DEFAULT_DICTS)
    rates = [b.rate for b in price_area(60000, tiers).breakdown]
    assert rates == sorted(rates, reverse=True)

    step = 1000
    marginals = [
        price_area(sqft + step, tiers).total_price - price_area(sqft, tiers).total_price
        for sqft in range(0, 50001, step)
    ]
    for a, b in zip(marginals, marginals[1:]):
        assert b <= a + 1e-9


def test_schedule_without_unbounded_tier_ignores_overflow():
    tiers = [
        {"up_to_sqft": 5000, "rate_per_sqft": 0.01},
        {"up_to_sqft": 10000, "rate_per_sqft": 0.02},
    ]
    assert price_area(20000, tiers).total_price == 150.0


def test_accepts_objects_with_tier_attributes():
    class Row:
        def __init__(self, up_to_sqft, rate_per_sqft):
            self.up_to_sqft = up_to_sqft
            self.rate_per_sqft = rate_per_sqft

    rows = [Row(5000, 0.012), Row(None, 0.005)]
    assert price_area(6000, rows).total_price == 65.0


def test_flat_pricing():
    assert price_flat(8000, 0.01) == 80.0
    assert price_flat(0, 0.01) == 0.0
    assert price_flat(8000, 0) == 0.0

    result = price_area_flat(8000, 0.01)
    assert result.total_price == 80.0
    assert len(result.breakdown) == 1
    assert price_area_flat(0, 0.01).breakdown == []


def test_effective_rate():
    assert effective_rate(205.0, 25000) == pytest.approx(0.0082)
    assert effective_rate(100.0, 0) == 0.0


def test_default_schedule_is_valid():
    check = validate_pricing_tiers(DEFAULT_DICTS)
    assert check.valid
    assert check.errors == []


def test_validation_requires_tiers():
    check = validate_pricing_tiers([])
    assert not check.valid
    assert check.errors == ["At least one pricing tier is required"]


def test_validation_flags_bad_rates_and_bounds():
    check = validate_pricing_tiers(
        [
            {"up_to_sqft": 5000, "rate_per_sqft": 0},
            {"up_to_sqft": 5000, "rate_per_sqft": 0.01},
        ]
    )
    assert not check.valid
    assert "Tier 1: Rate must be a positive number" in check.errors
    assert "Tier 2: Upper limit must be greater than previous tier (5000)" in check.errors
    assert any("No limit" in e for e in check.errors)


def test_validation_rejects_two_unbounded_tiers():
    check = validate_pricing_tiers(
        [PricingTier(None, 0.01), PricingTier(None, 0.02)]
    )
    assert not check.valid
    assert check.errors == ['Only one tier may have "No limit" as upper bound']


def test_validation_reports_unparseable_tier():
    check = validate_pricing_tiers([{"up_to_sqft": "lots", "rate_per_sqft": 0.01}])
    assert not check.valid
    assert check.errors == ["Tier 1: not a valid tier"]


def test_compare_pricing():
    same = compare_pricing(10000, DEFAULT_DICTS, 0.01)
    assert same.tiered_price == same.flat_price == 100.0
    assert same.savings == 0

    big = compare_pricing(25000, DEFAULT_DICTS, 0.01)
    assert big.flat_price == 250.0
    assert big.tiered_price == 205.0
    assert big.savings == 45.0
    assert big.savings_percent == 18.0

    assert compare_pricing(1000, DEFAULT_DICTS, 0).savings_percent == 0.0


def test_half_cents_round_up():
    assert price_flat(125, 0.001) == 0.13
    assert price_area(1, [{"up_to_sqft": None, "rate_per_sqft": 0.125}]).total_price == 0.13
    assert price_area_flat(125, 0.001).total_price == 0.13


def test_validation_reports_infinite_ceiling():
    check = validate_pricing_tiers(
        [
            {"up_to_sqft": float("inf"), "rate_per_sqft": 0.01},
            {"up_to_sqft": None, "rate_per_sqft": 0.005},
        ]
    )
    assert not check.valid
    assert check.errors == ["Tier 1: not a valid tier"]
