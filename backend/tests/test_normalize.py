import pytest

from wager_tracker import NormalizationKind, PricePoint, normalize
from wager_tracker.normalize import (
    accumulate_daily_rate,
    accumulate_fx_with_spread,
    accumulate_monthly_rate,
    monthly_spread,
    prices_to_portfolio_values,
    shared_date_axis,
)


def _series(*pairs):
    return [PricePoint(date=d, value=v) for d, v in pairs]


@pytest.mark.parametrize("first_price", [0.0001, 1.0, 337_512.45, 1e9])
def test_price_ratio_first_value_is_initial_investment(first_price):
    prices = _series(("2024-06-24", first_price), ("2024-06-25", first_price * 1.5))
    values = prices_to_portfolio_values(prices, 100_000)
    assert values[0].value == 100_000
    assert values[1].value == pytest.approx(150_000)


def test_price_ratio_example_series():
    prices = _series(("2024-01-01", 100), ("2024-02-01", 110), ("2024-03-01", 99))
    values = normalize(NormalizationKind.PRICE_RATIO, prices, initial_investment=100_000)
    assert [p.date for p in values] == ["2024-01-01", "2024-02-01", "2024-03-01"]
    assert [p.value for p in values] == pytest.approx([100_000, 110_000, 99_000])


def test_empty_inputs_produce_empty_outputs():
    assert prices_to_portfolio_values([], 100_000) == []
    assert accumulate_daily_rate([], 100_000) == []
    assert accumulate_fx_with_spread([], 100_000, 0.04, "2024-06-24") == []
    assert normalize(NormalizationKind.PRICE_RATIO, [], initial_investment=1) == []
    assert normalize(NormalizationKind.LINEAR_SPREAD_FX, [], initial_investment=1) == []


def test_daily_rate_compounds_geometrically():
    rates = _series(("2024-06-24", 0.1), ("2024-06-25", 0.1), ("2024-06-26", 0.1))
    values = accumulate_daily_rate(rates, 1000)
    assert len(values) == 3
    assert values[-1].value == pytest.approx(1000 * 1.001**3)
    assert values[-1].value == pytest.approx(1003.003001)


def test_daily_rate_monotonic_only_with_non_negative_rates():
    up = accumulate_daily_rate(_series(("2024-07-01", 0.04), ("2024-07-02", 0.0), ("2024-07-03", 0.05)), 100)
    assert all(b.value >= a.value for a, b in zip(up, up[1:]))

    mixed = accumulate_daily_rate(_series(("2024-07-01", 0.04), ("2024-07-02", -0.01)), 100)
    assert mixed[1].value < mixed[0].value


def test_monthly_spread_equivalent():
    assert monthly_spread(0.0) == 0.0
    assert (1 + monthly_spread(0.05)) ** 12 == pytest.approx(1.05)


def test_monthly_rate_resamples_once_per_month():
    ipca = _series(("2024-07-01", 0.5), ("2024-08-01", 1.0))
    axis = ["2024-06-28", "2024-07-01", "2024-07-02", "2024-07-31", "2024-08-05", "2024-08-06"]
    values = accumulate_monthly_rate(ipca, axis, 1000)

    assert [p.date for p in values] == axis
    # June has no published rate: flat.
    assert values[0].value == pytest.approx(1000)
    assert values[1].value == pytest.approx(1005)
    assert values[2].value == values[1].value
    assert values[3].value == values[1].value
    assert values[4].value == pytest.approx(1005 * 1.01)
    assert values[5].value == values[4].value


def test_monthly_rate_with_annual_spread():
    ipca = _series(("2024-07-01", 0.5))
    values = accumulate_monthly_rate(ipca, ["2024-07-03", "2024-07-04"], 100_000, annual_spread=0.05)
    expected = 100_000 * (1 + 0.005 + (1.05 ** (1 / 12) - 1))
    assert values[0].value == pytest.approx(expected)
    assert values[1].value == pytest.approx(expected)


def test_monthly_rate_without_rates_carries_initial_value():
    values = accumulate_monthly_rate([], ["2024-07-01", "2024-08-01"], 500)
    assert [p.value for p in values] == [500, 500]


def test_fx_with_linear_spread_counts_from_campaign_start():
    dolar = _series(("2024-06-25", 5.0), ("2025-06-25", 5.5))
    values = accumulate_fx_with_spread(dolar, 100_000, 0.04, "2024-06-24")
    assert values[0].value == pytest.approx(100_000 * (1 + 0.04 * 1 / 365))
    assert values[1].value == pytest.approx(100_000 * 1.1 * (1 + 0.04 * 366 / 365))


def test_zero_first_price_holds_initial_investment():
    prices = _series(("2024-06-24", 0.0), ("2024-06-25", 10.0))
    values = normalize(NormalizationKind.PRICE_RATIO, prices, initial_investment=100_000)
    assert [p.value for p in values] == [100_000, 100_000]


def test_zero_first_fx_rate_accrues_spread_only():
    dolar = _series(("2024-06-24", 0.0), ("2024-06-25", 5.4))
    values = normalize(
        NormalizationKind.LINEAR_SPREAD_FX,
        dolar,
        initial_investment=100_000,
        annual_spread=0.04,
        start_date="2024-06-24",
    )
    assert values[0].value == 100_000
    assert values[1].value == pytest.approx(100_000 * (1 + 0.04 / 365))


def test_normalize_sorts_and_keeps_last_duplicate():
    prices = _series(("2024-06-26", 120), ("2024-06-24", 100), ("2024-06-26", 130))
    values = normalize(NormalizationKind.PRICE_RATIO, prices, initial_investment=1000)
    assert [p.date for p in values] == ["2024-06-24", "2024-06-26"]
    assert values[-1].value == pytest.approx(1300)


def test_normalize_does_not_mutate_input():
    prices = _series(("2024-06-25", 2.0), ("2024-06-24", 1.0))
    snapshot = list(prices)
    normalize(NormalizationKind.PRICE_RATIO, prices, initial_investment=10)
    assert prices == snapshot


def test_shared_date_axis_is_sorted_union():
    a = _series(("2024-06-25", 1), ("2024-06-24", 1))
    b = _series(("2024-06-25", 1), ("2024-06-29", 1))
    assert shared_date_axis(a, b) == ["2024-06-24", "2024-06-25", "2024-06-29"]
