# constants.py

MINOR_UNITS_PER_UNIT: int = 100  # cents per dollar
BASIS_POINTS_PER_UNIT: int = 10_000  # 1 bp = 0.01%
BASIS_POINTS_PER_PERCENT: int = 100

DEFAULT_MAX_YEARS: int = 100
DEFAULT_CURRENCY_SYMBOL: str = "$"
DEFAULT_OUTPUT_FILENAME: str = "simulation_results.csv"
DEFAULT_SCENARIO_NAME: str = "DefaultScenario"

CSV_COLUMNS = ["Year", "Taxable_Balance", "Tax_Advantaged_Balance", "Tax_Drag_Loss"]

EXIT_OK: int = 0
EXIT_INVALID_INPUT: int = 1
EXIT_OUTPUT_FAILURE: int = 2

# Plotting constants
TEXT_INPUT_COLOR = '#1f77b4'
TEXT_OUTPUT_COLOR = '#ff7f0e'
