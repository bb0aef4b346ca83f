import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from loguru import logger
from matplotlib.ticker import FuncFormatter

from config import Config
from constants import TEXT_INPUT_COLOR, TEXT_OUTPUT_COLOR
from money import format_basis_points, format_currency
from simulation import SimulationInput, SimulationResult


def plot_balance_trajectories(
    result: SimulationResult,
    sim_input: SimulationInput,
    input_config: Config,
    filename: str,
    dpi_setting: int = 150,
):
    """
    Plots both account balances year by year and shades the tax drag between them.

    Args:
        result: Projection output to draw.
        sim_input: Fixed-point inputs, used for the annotation block.
        input_config: Scenario settings (nickname and currency symbol).
        filename: The full path and filename to save the plot to.
        dpi_setting: The DPI (dots per inch) for the saved image.
    """
    df = result.to_dataframe()
    if df.empty:
        logger.warning(f"No yearly data to plot for '{filename}'. Skipping.")
        return

    symbol = input_config.currency_symbol
    plt.figure(figsize=(12, 7))
    ax = plt.gca()

    ax.plot(
        df["Year"],
        df["Tax_Advantaged_Balance"],
        color="green",
        linewidth=1.8,
        marker="o",
        markersize=3,
        label="Tax-Advantaged (Roth-style)",
    )
    ax.plot(
        df["Year"],
        df["Taxable_Balance"],
        color="blue",
        linewidth=1.8,
        marker="o",
        markersize=3,
        label="Taxable (annual tax on gains)",
    )
    ax.fill_between(
        df["Year"],
        df["Taxable_Balance"],
        df["Tax_Advantaged_Balance"],
        color="salmon",
        alpha=0.25,
        label="Tax Drag",
        interpolate=True,
    )

    input_lines = [
        f"Scenario: {input_config.Nickname}",
        f"Principal: {format_currency(sim_input.principal, symbol)}",
        f"Contribution: {format_currency(sim_input.annual_contribution, symbol)}/yr",
        f"Return: {format_basis_points(sim_input.growth_rate)}, Tax: {format_basis_points(sim_input.tax_rate)}",
    ]
    output_lines = [
        f"Taxable: {format_currency(result.final_taxable_balance, symbol)}",
        f"Tax-Adv: {format_currency(result.final_tax_advantaged_balance, symbol)}",
        f"Drag: {format_currency(result.tax_drag_loss, symbol)} ({result.tax_drag_pct}%)",
    ]

    line_spacing_val = 0.035
    for i, line_text in enumerate(input_lines + output_lines):
        is_output = i >= len(input_lines)
        ax.text(
            0.02,
            0.80 - i * line_spacing_val,
            line_text,
            transform=ax.transAxes,
            ha="left",
            va="top",
            fontsize=7,
            color=TEXT_OUTPUT_COLOR if is_output else TEXT_INPUT_COLOR,
            fontweight="bold" if is_output else "normal",
            bbox=dict(
                facecolor="white",
                alpha=0.80,
                pad=2,
                edgecolor="lightgrey",
                boxstyle="round,pad=0.3",
            ),
        )

    def currency_formatter(x_val, pos):
        return f"{symbol}{x_val:,.0f}"

    ax.yaxis.set_major_formatter(FuncFormatter(currency_formatter))
    plt.title(f"Taxable vs. Tax-Advantaged Growth: {input_config.Nickname}", fontsize=14)
    plt.xlabel("Year", fontsize=10)
    plt.ylabel(f"Balance ({symbol})", fontsize=10)
    plt.xticks(fontsize=8)
    plt.yticks(fontsize=8)
    ax.legend(fontsize=7, loc="upper left", bbox_to_anchor=(0.01, 0.98))
    plt.grid(True, linestyle=":", alpha=0.6)
    plt.tight_layout()

    try:
        plt.savefig(filename, dpi=dpi_setting)
        logger.info(f"Balance plot saved to {filename}")
    except Exception as e:
        logger.error(f"Error saving balance plot '{filename}': {e}")
    plt.close()
