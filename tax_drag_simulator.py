# tax_drag_simulator - Taxable vs. Tax-Advantaged Growth Simulator
# Description: Projects a taxable and a Roth-style account side by side and reports the tax drag.

import sys
import datetime as _dt
from typing import List, Optional

from loguru import logger

from config import Config, load_config
from constants import EXIT_INVALID_INPUT, EXIT_OK, EXIT_OUTPUT_FAILURE
from errors import ConfigurationError, InvalidInputError, OutputWriteFailure
from plotting import plot_balance_trajectories
from simulation import TaxDragSimulator
from utils import (
    configure_logging,
    export_csv,
    format_summary,
    log_input_parameters,
    log_simulation_results,
    prompt_for_config,
)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main execution entry point.

    Reads the scenario from the JSON file given as the first argument, or
    prompts for it when no argument is given. Runs the projection, writes the
    CSV report and prints the summary. Returns the process exit status.
    """
    args = sys.argv[1:] if argv is None else argv

    current_timestamp_str = _dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = f"tax_drag_log_{current_timestamp_str}.log"
    configure_logging(log_filename)
    logger.info(f"Logging initialized. Log file: {log_filename}")

    try:
        if args:
            logger.info(f"Loading configuration from: {args[0]}")
            config: Config = load_config(args[0])
        else:
            config = prompt_for_config()
        simulator = TaxDragSimulator(config)
    except ConfigurationError as e:
        logger.error(f"Configuration file error: {e}")
        return EXIT_INVALID_INPUT
    except InvalidInputError as e:
        logger.error(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT
    except (EOFError, KeyboardInterrupt):
        logger.error("Input aborted before all values were entered.")
        return EXIT_INVALID_INPUT

    log_input_parameters(config, simulator.sim_input)
    result = simulator.run()

    try:
        export_csv(result, config.output_file)
    except OutputWriteFailure as e:
        logger.error(f"Simulation succeeded but the report could not be saved: {e}")
        return EXIT_OUTPUT_FAILURE

    log_simulation_results(config, result)
    for line in format_summary(result, config.currency_symbol, config.output_file):
        print(line)

    if config.plot_file:
        plot_balance_trajectories(
            result, simulator.sim_input, config, config.plot_file
        )

    logger.info(
        f"--- Main execution finished for scenario '{config.Nickname}'. Log: {log_filename} ---"
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
