import sys
from typing import Callable, List, Optional

import pandas as pd
from loguru import logger

from config import Config
from constants import CSV_COLUMNS
from errors import InvalidHorizon, OutputWriteFailure
from money import format_basis_points, format_currency, format_minor_units
from simulation import SimulationInput, SimulationResult

STDERR_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def configure_logging(log_filename: Optional[str] = None, level: str = "INFO") -> None:
    """Replaces loguru's default handler with a stderr sink and an optional file sink."""
    logger.remove()
    logger.add(sys.stderr, format=STDERR_FORMAT, level=level, colorize=True)
    if log_filename:
        logger.add(log_filename, format=FILE_FORMAT, level="DEBUG", rotation="10 MB")


def prompt_for_config(
    input_fn: Optional[Callable[[str], str]] = None,
    output_fn: Optional[Callable[[str], None]] = None,
) -> Config:
    """
    Asks for the five simulation inputs on the console, in fixed order.

    Amounts and rates are validated later by ``Config.to_simulation_input``;
    only the year count is parsed here since ``Config`` requires an integer.
    """
    input_fn = input_fn or input
    output_fn = output_fn or print
    output_fn("=== Wealth Management Simulation ===")
    output_fn("This tool compares taxable vs. tax-advantaged investment growth")
    output_fn("Assumptions: Tax-advantaged = Roth-style (no tax on withdrawal)")
    output_fn("             Taxable = annual tax on investment gains\n")

    principal = input_fn("Enter Principal (e.g. $10,000.00): ")
    annual = input_fn("Enter Annual Contribution (e.g. $500.00): ")
    rate_pct = input_fn("Enter Rate of Return (% per year, e.g. 7.5): ")
    tax_pct = input_fn("Enter Tax Rate (% on gains, e.g. 24): ")
    years_text = input_fn("Enter Number of Years (1-100): ")

    try:
        years = int(years_text.strip())
    except ValueError as e:
        raise InvalidHorizon(
            f"Number of years must be a whole number, got {years_text!r}"
        ) from e

    return Config(
        scenario="Interactive",
        principal=principal,
        annual_contribution=annual,
        growth_rate_pct=rate_pct,
        tax_rate_pct=tax_pct,
        years=years,
    )


def log_input_parameters(config: Config, sim_input: SimulationInput) -> None:
    """Logs the normalised inputs so the user can verify what was parsed."""
    symbol = config.currency_symbol
    logger.info(f"--- Input Verification For Scenario: {config.Nickname} ---")
    logger.info(f"Principal:           {format_currency(sim_input.principal, symbol)}")
    logger.info(
        f"Annual Contribution: {format_currency(sim_input.annual_contribution, symbol)}"
    )
    logger.info(f"Rate of Return:      {format_basis_points(sim_input.growth_rate)}")
    logger.info(f"Tax Rate:            {format_basis_points(sim_input.tax_rate)}")
    logger.info(f"Years:               {sim_input.years}")
    logger.info(f"Output File:         {config.output_file}")
    if config.plot_file:
        logger.info(f"Plot File:           {config.plot_file}")
    logger.info("--- End of Input Parameters ---")


def results_to_csv_frame(result: SimulationResult) -> pd.DataFrame:
    """Year table with money rendered as exact two-decimal strings."""
    rows = [
        [
            str(s.year),
            format_minor_units(s.taxable_balance),
            format_minor_units(s.tax_advantaged_balance),
            format_minor_units(s.tax_drag_loss),
        ]
        for s in result.snapshots
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_csv(result: SimulationResult, filename: str) -> None:
    """Writes the per-year CSV report, raising OutputWriteFailure on I/O errors."""
    frame = results_to_csv_frame(result)
    try:
        frame.to_csv(filename, index=False, encoding="utf-8", lineterminator="\n")
    except OSError as e:
        raise OutputWriteFailure(filename, e.strerror or str(e)) from e
    logger.info(f"CSV report with {len(frame)} rows saved to {filename}")


def format_summary(
    result: SimulationResult, symbol: str, output_file: Optional[str] = None
) -> List[str]:
    lines = [
        "",
        "=== Simulation Complete ===",
        f"After {result.years} years:",
        f"  Taxable Account:        {format_currency(result.final_taxable_balance, symbol)}",
        f"  Tax-Advantaged Account: {format_currency(result.final_tax_advantaged_balance, symbol)}",
        f"  Tax Drag Loss:          {format_currency(result.tax_drag_loss, symbol)}",
        f"  Loss as % of tax-free:  {result.tax_drag_pct}%",
    ]
    if output_file is not None:
        lines += ["", f"Results exported to {output_file}"]
    return lines


def log_simulation_results(config: Config, result: SimulationResult) -> None:
    """Records the final figures in the log file."""
    symbol = config.currency_symbol
    logger.debug(f"--- Final Simulation Results for Scenario: '{config.Nickname}' ---")
    logger.debug(f"Total contributed: {format_currency(result.total_contributed, symbol)}")
    logger.debug(f"Total tax paid: {format_currency(result.total_tax_paid, symbol)}")
    for line in format_summary(result, symbol):
        if line.strip():
            logger.debug(line.strip())
