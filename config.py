import os
import json
from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
from loguru import logger

from constants import (
    DEFAULT_CURRENCY_SYMBOL,
    DEFAULT_MAX_YEARS,
    DEFAULT_OUTPUT_FILENAME,
    DEFAULT_SCENARIO_NAME,
)
from errors import ConfigurationError
from money import parse_money, to_basis_points
from simulation import SimulationInput, validate_input


class Config(BaseModel):
    """Scenario configuration for the tax drag simulation.

    Amounts and rates are kept as the user typed them; they are converted to
    fixed-point values by ``to_simulation_input`` so that malformed numbers
    surface as ``InvalidAmount`` / ``InvalidRate`` rather than schema errors.
    """

    Nickname: str = Field(
        DEFAULT_SCENARIO_NAME,
        alias="scenario",
        description="A nickname for this simulation scenario.",
    )
    principal: str = Field(..., description="Starting balance of both accounts, e.g. '$10,000.00'.")
    annual_contribution: str = Field(
        "0", description="Amount added to both accounts at the start of every year."
    )
    growth_rate_pct: str = Field(..., description="Annual rate of return in percent, e.g. '7.5'.")
    tax_rate_pct: str = Field(..., description="Annual tax rate on gains in percent, e.g. '24'.")
    years: int = Field(..., strict=True, description="Number of years to simulate.")
    max_years: int = Field(DEFAULT_MAX_YEARS, ge=1, description="Upper bound on 'years'.")

    output_file: str = Field(DEFAULT_OUTPUT_FILENAME, min_length=1)
    plot_file: Optional[str] = Field(None, description="Optional PNG chart of both balances.")
    currency_symbol: str = Field(DEFAULT_CURRENCY_SYMBOL, max_length=3)

    model_config = {"validate_by_name": True, "validate_assignment": True}

    @field_validator(
        "principal", "annual_contribution", "growth_rate_pct", "tax_rate_pct",
        mode="before",
    )
    @classmethod
    def numbers_as_text(cls, v: Any) -> Any:
        # JSON numbers are kept verbatim so no float rounding sneaks in
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return format(Decimal(str(v)), "f")
        return v

    @field_validator("output_file")
    @classmethod
    def check_output_extension(cls, v: str) -> str:
        if not v.lower().endswith(".csv"):
            logger.warning(f"Output file '{v}' does not end in .csv; writing CSV anyway.")
        return v

    def to_simulation_input(self) -> SimulationInput:
        """Converts to fixed-point inputs, raising InvalidInputError subclasses."""
        sim_input = SimulationInput(
            principal=parse_money(self.principal, symbol=self.currency_symbol),
            annual_contribution=parse_money(
                self.annual_contribution, symbol=self.currency_symbol
            ),
            growth_rate=to_basis_points(self.growth_rate_pct),
            tax_rate=to_basis_points(self.tax_rate_pct),
            years=self.years,
            max_years=self.max_years,
        )
        validate_input(sim_input)
        return sim_input


def load_config_from_json(file_path: str) -> Dict[str, Any]:
    """Loads and returns the configuration dictionary from a JSON file."""
    if not os.path.exists(file_path):
        raise ConfigurationError(f"Configuration file not found at: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Error parsing JSON file '{file_path}': {e}"
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Unexpected error reading config file '{file_path}': {e}"
        ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file '{file_path}' must contain a JSON object."
        )
    return data


def load_config(file_path: str) -> Config:
    """Loads a JSON file and validates it into a ``Config``."""
    config_dict = load_config_from_json(file_path)
    try:
        return Config(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in '{file_path}': {e}") from e
