from decimal import Decimal

import pytest

from config import Config
from errors import InvalidAmount, InvalidHorizon, InvalidRate
from simulation import SimulationInput, TaxDragSimulator, run_projection


def make_input(**overrides) -> SimulationInput:
    values = dict(
        principal=1_000_000,
        annual_contribution=50_000,
        growth_rate=700,
        tax_rate=2400,
        years=30,
    )
    values.update(overrides)
    return SimulationInput(**values)


@pytest.mark.parametrize("years", [0, -1, -100])
def test_non_positive_horizon_is_rejected(years):
    with pytest.raises(InvalidHorizon):
        run_projection(make_input(years=years))


def test_horizon_above_cap_is_rejected():
    with pytest.raises(InvalidHorizon):
        run_projection(make_input(years=101))
    assert run_projection(make_input(years=150, max_years=200)).years == 150


@pytest.mark.parametrize("tax_rate", [-1, 10_001])
def test_tax_rate_outside_zero_to_hundred_percent_is_rejected(tax_rate):
    with pytest.raises(InvalidRate):
        run_projection(make_input(tax_rate=tax_rate))


def test_total_loss_growth_rate_is_rejected():
    with pytest.raises(InvalidRate):
        run_projection(make_input(growth_rate=-10_000))


def test_negative_amounts_are_rejected():
    with pytest.raises(InvalidAmount):
        run_projection(make_input(principal=-1))
    with pytest.raises(InvalidAmount):
        run_projection(make_input(annual_contribution=-1))


def test_one_snapshot_per_year_in_order():
    result = run_projection(make_input(years=25))
    assert len(result.snapshots) == 25
    assert [s.year for s in result.snapshots] == list(range(1, 26))
    assert result.snapshots[-1].taxable_balance == result.final_taxable_balance
    assert result.snapshots[-1].tax_advantaged_balance == result.final_tax_advantaged_balance


def test_tax_drag_is_never_negative_with_positive_growth_and_tax():
    result = run_projection(make_input())
    for snapshot in result.snapshots:
        assert snapshot.tax_advantaged_balance >= snapshot.taxable_balance
        assert snapshot.tax_drag_loss >= 0
    assert result.tax_drag_loss > 0


def test_zero_tax_keeps_accounts_equal():
    result = run_projection(make_input(tax_rate=0))
    for snapshot in result.snapshots:
        assert snapshot.taxable_balance == snapshot.tax_advantaged_balance
        assert snapshot.tax_paid == 0
    assert result.total_tax_paid == 0


def test_projection_is_deterministic():
    first = run_projection(make_input())
    second = run_projection(make_input())
    assert first == second
    assert first.snapshots == second.snapshots


def test_ten_percent_growth_without_tax():
    result = run_projection(
        make_input(principal=1_000_000, annual_contribution=0, growth_rate=1000, tax_rate=0, years=1)
    )
    assert result.final_taxable_balance == 1_100_000
    assert result.final_tax_advantaged_balance == 1_100_000
    assert result.tax_drag_loss == 0
    assert result.tax_drag_pct == Decimal("0.0")


def test_ten_percent_growth_with_half_taxed():
    result = run_projection(
        make_input(principal=1_000_000, annual_contribution=0, growth_rate=1000, tax_rate=5000, years=1)
    )
    (snapshot,) = result.snapshots
    assert snapshot.tax_paid == 50_000
    assert result.final_taxable_balance == 1_050_000
    assert result.final_tax_advantaged_balance == 1_100_000
    assert result.tax_drag_loss == 50_000
    assert result.tax_drag_pct == Decimal("4.5")


def test_contributions_only():
    result = run_projection(
        make_input(principal=0, annual_contribution=100_000, growth_rate=0, tax_rate=0, years=3)
    )
    assert [s.taxable_balance for s in result.snapshots] == [100_000, 200_000, 300_000]
    assert result.final_taxable_balance == 300_000
    assert result.final_tax_advantaged_balance == 300_000
    assert all(s.tax_drag_loss == 0 for s in result.snapshots)
    assert result.total_contributed == 300_000


def test_contribution_is_not_taxed():
    # 1000.00 contributed, 10% growth -> 100.00 interest, 50% tax -> 50.00
    result = run_projection(
        make_input(principal=0, annual_contribution=100_000, growth_rate=1000, tax_rate=5000, years=1)
    )
    assert result.final_tax_advantaged_balance == 110_000
    assert result.final_taxable_balance == 105_000


def test_half_cent_tax_rounds_up():
    # 0.01 principal, 50% growth -> 0.015 rounds to 0.02; interest 1 cent at 50% -> 0.5 -> 1
    result = run_projection(
        make_input(principal=1, annual_contribution=0, growth_rate=5000, tax_rate=5000, years=1)
    )
    assert result.final_tax_advantaged_balance == 2
    assert result.snapshots[0].tax_paid == 1
    assert result.final_taxable_balance == 1


def test_losses_are_not_taxed():
    result = run_projection(
        make_input(principal=1_000_000, annual_contribution=0, growth_rate=-1000, tax_rate=5000, years=2)
    )
    assert result.total_tax_paid == 0
    assert result.final_taxable_balance == result.final_tax_advantaged_balance == 810_000


def test_zero_balance_gives_zero_drag_pct():
    result = run_projection(
        make_input(principal=0, annual_contribution=0, growth_rate=1000, tax_rate=5000, years=5)
    )
    assert result.final_tax_advantaged_balance == 0
    assert result.tax_drag_pct == Decimal("0.0")


def test_to_dataframe_matches_snapshots():
    result = run_projection(make_input(years=4))
    df = result.to_dataframe()
    assert list(df["Year"]) == [1, 2, 3, 4]
    assert df["Taxable_Balance"].iloc[-1] == result.final_taxable_balance / 100
    assert (df["Tax_Drag_Loss"] >= 0).all()


def test_simulator_runs_configured_scenario():
    config = Config(
        scenario="Doc Example",
        principal="$10,000.00",
        annual_contribution="0",
        growth_rate_pct="10",
        tax_rate_pct="50",
        years=1,
    )
    result = TaxDragSimulator(config).run()
    assert result.final_taxable_balance == 1_050_000
    assert result.final_tax_advantaged_balance == 1_100_000
