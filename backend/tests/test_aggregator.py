import pytest

from wager_tracker import PricePoint, WagerAggregator, WagerConfig, compute_dashboard
from wager_tracker.config import InstrumentSpec
from wager_tracker.models import NormalizationKind


def _series(*pairs):
    return [PricePoint(date=d, value=v) for d, v in pairs]


def _raw():
    return {
        "bitcoin": _series(
            ("2024-06-24", 340_000.0),
            ("2024-06-25", 350_000.0),
            ("2024-07-01", 374_000.0),
            ("2024-07-02", 357_000.0),
        ),
        "ibovespa": _series(
            ("2024-06-24", 122_000.0),
            ("2024-06-25", 122_610.0),
            ("2024-07-01", 124_440.0),
        ),
        "cdi": _series(("2024-06-24", 0.039270), ("2024-06-25", 0.039270), ("2024-07-01", 0.039270)),
        "ipca": _series(("2024-07-01", 0.38)),
        "poupanca": _series(("2024-06-24", 0.5768), ("2024-07-01", 0.5915)),
        "dolar": _series(("2024-06-24", 5.4), ("2024-07-01", 5.6)),
        "ifix": _series(("2024-06-24", 3_200.0), ("2024-07-02", 3_232.0)),
    }


def test_dashboard_current_values_and_returns():
    dashboard = compute_dashboard(_raw())

    bitcoin = dashboard.per_instrument["bitcoin"]
    assert bitcoin.value_series[0].value == 100_000
    assert bitcoin.current_value == pytest.approx(105_000)
    assert bitcoin.return_since_inception == pytest.approx(5.0)

    ibovespa = dashboard.per_instrument["ibovespa"]
    assert ibovespa.current_value == pytest.approx(102_000)
    assert ibovespa.return_since_inception == pytest.approx(2.0)


def test_monthly_indicators_follow_primary_date_axis():
    dashboard = compute_dashboard(_raw())
    axis = ["2024-06-24", "2024-06-25", "2024-07-01", "2024-07-02"]
    for key in ("ipca", "ipcaPlus5", "poupanca"):
        assert [p.date for p in dashboard.per_instrument[key].value_series] == axis

    ipca = dashboard.per_instrument["ipca"]
    assert ipca.current_value == pytest.approx(100_380)
    ipca_plus5 = dashboard.per_instrument["ipcaPlus5"]
    assert ipca_plus5.current_value == pytest.approx(100_000 * (1.0038 + 1.05 ** (1 / 12) - 1))


def test_dolar_plus_spread_uses_campaign_start():
    dashboard = compute_dashboard(_raw())
    dolar = dashboard.per_instrument["dolarPlus4"].value_series
    assert dolar[0].value == pytest.approx(100_000)
    assert dolar[1].value == pytest.approx(100_000 * 5.6 / 5.4 * (1 + 0.04 * 7 / 365))


def test_merged_timeline_covers_every_date():
    dashboard = compute_dashboard(_raw())
    dates = [row.date for row in dashboard.merged_timeline]
    assert dates == ["2024-06-24", "2024-06-25", "2024-07-01", "2024-07-02"]
    last = dashboard.merged_timeline[-1]
    assert last.get("bitcoin") == 105_000
    assert last.get("ibovespa") == 102_000
    assert last.get("dolarPlus4") == round(100_000 * 5.6 / 5.4 * (1 + 0.04 * 7 / 365))


def test_table_rows_in_configuration_order():
    dashboard = compute_dashboard(_raw())
    names = [row.name for row in dashboard.table_rows]
    assert names == ["Bitcoin", "Ibovespa", "CDI", "Poupança", "IFIX", "IPCA", "IPCA + 5%", "Dólar + 4%"]
    bitcoin_row = dashboard.table_rows[0]
    assert bitcoin_row.color == "#FFFFFF"
    assert bitcoin_row.returns.since_inception == pytest.approx(5.0)
    assert bitcoin_row.consistency.positive_months == 2


def test_missing_series_fall_back_to_initial_investment():
    dashboard = compute_dashboard({"bitcoin": _raw()["bitcoin"]})
    ibovespa = dashboard.per_instrument["ibovespa"]
    assert ibovespa.value_series == []
    assert ibovespa.current_value == 100_000
    assert ibovespa.return_since_inception == 0.0
    assert dashboard.table_rows[1].returns.since_inception == 0.0


def test_zero_first_quote_does_not_break_dashboard():
    raw = _raw()
    raw["bitcoin"] = _series(("2024-06-24", 0.0), ("2024-06-25", 1.0))
    raw["dolar"] = _series(("2024-06-24", 0.0), ("2024-07-01", 5.6))
    dashboard = compute_dashboard(raw)
    assert dashboard.per_instrument["bitcoin"].current_value == 100_000
    assert dashboard.per_instrument["bitcoin"].return_since_inception == 0.0
    assert dashboard.per_instrument["dolarPlus4"].value_series[0].value == pytest.approx(100_000)


def test_duplicated_indicator_month_counted_once():
    raw = _raw()
    raw["ipca"] = _series(("2024-07-01", -0.50), ("2024-07-01", 0.38))
    dashboard = compute_dashboard(raw)
    ipca_row = dashboard.table_rows[5]
    assert ipca_row.name == "IPCA"
    assert ipca_row.consistency.positive_months == 1
    assert ipca_row.consistency.negative_months == 0
    assert ipca_row.consistency.best_month == pytest.approx(0.38)


def test_custom_configuration():
    config = WagerConfig(
        initial_investment=1_000.0,
        start_date="2024-01-01",
        instruments=(
            InstrumentSpec("bitcoin", "Bitcoin", "#FFF", NormalizationKind.PRICE_RATIO),
            InstrumentSpec("ibovespa", "Ibovespa", "#00F", NormalizationKind.PRICE_RATIO),
        ),
    )
    assert config.source_ids == ("bitcoin", "ibovespa")
    dashboard = WagerAggregator(config).compute_dashboard(_raw())
    assert set(dashboard.per_instrument) == {"bitcoin", "ibovespa"}
    assert dashboard.per_instrument["bitcoin"].current_value == pytest.approx(1_050)


def test_default_source_ids_share_ipca():
    assert WagerConfig().source_ids == ("bitcoin", "ibovespa", "cdi", "poupanca", "ifix", "ipca", "dolar")
    with pytest.raises(KeyError):
        WagerConfig().instrument("nasdaq")
