from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Tuple, TYPE_CHECKING

import pandas as pd
from loguru import logger

from constants import (
    BASIS_POINTS_PER_UNIT,
    CSV_COLUMNS,
    DEFAULT_MAX_YEARS,
    MINOR_UNITS_PER_UNIT,
)
from errors import InvalidAmount, InvalidHorizon, InvalidRate
from money import Money, Rate, apply_growth, apply_tax, format_basis_points

if TYPE_CHECKING:
    from config import Config


@dataclass(frozen=True)
class SimulationInput:
    principal: Money
    annual_contribution: Money
    growth_rate: Rate
    tax_rate: Rate
    years: int
    max_years: int = DEFAULT_MAX_YEARS


@dataclass(frozen=True)
class YearlySnapshot:
    """Balances of both accounts at the end of one simulated year."""

    year: int
    taxable_balance: Money
    tax_advantaged_balance: Money
    tax_paid: Money = 0

    @property
    def tax_drag_loss(self) -> Money:
        return self.tax_advantaged_balance - self.taxable_balance


@dataclass(frozen=True)
class SimulationResult:
    snapshots: Tuple[YearlySnapshot, ...]
    final_taxable_balance: Money
    final_tax_advantaged_balance: Money
    total_contributed: Money

    @property
    def years(self) -> int:
        return len(self.snapshots)

    @property
    def tax_drag_loss(self) -> Money:
        return self.final_tax_advantaged_balance - self.final_taxable_balance

    @property
    def tax_drag_pct(self) -> Decimal:
        """Drag as a percentage of the tax-advantaged balance, one decimal place."""
        if self.final_tax_advantaged_balance == 0:
            return Decimal("0.0")
        pct = Decimal(self.tax_drag_loss * 100) / Decimal(
            self.final_tax_advantaged_balance
        )
        return pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    @property
    def total_tax_paid(self) -> Money:
        return sum(s.tax_paid for s in self.snapshots)

    def to_dataframe(self) -> pd.DataFrame:
        """Per-year table in currency units, indexed 0..N-1, for charts and APIs."""
        rows = [
            {
                CSV_COLUMNS[0]: s.year,
                CSV_COLUMNS[1]: s.taxable_balance / MINOR_UNITS_PER_UNIT,
                CSV_COLUMNS[2]: s.tax_advantaged_balance / MINOR_UNITS_PER_UNIT,
                CSV_COLUMNS[3]: s.tax_drag_loss / MINOR_UNITS_PER_UNIT,
                "Tax_Paid": s.tax_paid / MINOR_UNITS_PER_UNIT,
            }
            for s in self.snapshots
        ]
        return pd.DataFrame(rows, columns=CSV_COLUMNS + ["Tax_Paid"])


def validate_input(sim_input: SimulationInput) -> None:
    """Raises the matching InvalidInputError subclass for out-of-range inputs."""
    if sim_input.years < 1:
        raise InvalidHorizon(
            f"Number of years must be at least 1, got {sim_input.years}"
        )
    if sim_input.years > sim_input.max_years:
        raise InvalidHorizon(
            f"Number of years must not exceed {sim_input.max_years}, got {sim_input.years}"
        )
    if sim_input.principal < 0:
        raise InvalidAmount("Principal must not be negative")
    if sim_input.annual_contribution < 0:
        raise InvalidAmount("Annual contribution must not be negative")
    if not 0 <= sim_input.tax_rate <= BASIS_POINTS_PER_UNIT:
        raise InvalidRate(
            f"Tax rate must be between 0% and 100%, got {format_basis_points(sim_input.tax_rate)}"
        )
    if sim_input.growth_rate <= -BASIS_POINTS_PER_UNIT:
        raise InvalidRate(
            f"Rate of return must be above -100%, got {format_basis_points(sim_input.growth_rate)}"
        )


def run_projection(sim_input: SimulationInput) -> SimulationResult:
    """
    Projects a taxable and a tax-advantaged account side by side.

    Each year the contribution is added to both accounts before growth. The
    tax-advantaged account keeps all of its growth. The taxable account pays
    ``tax_rate`` on the year's growth only (contributions are not taxable
    events); years with a loss pay no tax.

    Raises:
        InvalidHorizon, InvalidRate, InvalidAmount: before any year is simulated.
    """
    validate_input(sim_input)

    if sim_input.growth_rate < 0:
        logger.warning(
            f"Negative rate of return ({format_basis_points(sim_input.growth_rate)}) "
            "is outside the validated input range; results are unverified."
        )

    taxable_bal = sim_input.principal
    tax_free_bal = sim_input.principal
    snapshots: List[YearlySnapshot] = []

    for year in range(1, sim_input.years + 1):
        tax_free_bal = apply_growth(
            tax_free_bal + sim_input.annual_contribution, sim_input.growth_rate
        )

        balance_before_growth = taxable_bal + sim_input.annual_contribution
        balance_after_growth = apply_growth(balance_before_growth, sim_input.growth_rate)
        interest = balance_after_growth - balance_before_growth
        tax = apply_tax(interest, sim_input.tax_rate) if interest > 0 else 0
        taxable_bal = balance_after_growth - tax

        snapshots.append(
            YearlySnapshot(
                year=year,
                taxable_balance=taxable_bal,
                tax_advantaged_balance=tax_free_bal,
                tax_paid=tax,
            )
        )

    logger.debug(f"Projection finished after {sim_input.years} years.")
    return SimulationResult(
        snapshots=tuple(snapshots),
        final_taxable_balance=taxable_bal,
        final_tax_advantaged_balance=tax_free_bal,
        total_contributed=sim_input.principal
        + sim_input.annual_contribution * sim_input.years,
    )


class TaxDragSimulator:
    """
    Runs the taxable vs. tax-advantaged projection for one configured scenario.
    """

    def __init__(self, params_model: "Config"):
        self.params_model = params_model.model_copy(deep=True)
        self.sim_input = self.params_model.to_simulation_input()
        logger.info(
            f"Simulator initialized for scenario '{self.params_model.Nickname}' "
            f"({self.sim_input.years} years)"
        )

    def run(self) -> SimulationResult:
        result = run_projection(self.sim_input)
        logger.info(
            f"Scenario '{self.params_model.Nickname}' simulated: "
            f"{result.years} years, total tax paid {result.total_tax_paid / MINOR_UNITS_PER_UNIT:,.2f}"
        )
        return result
