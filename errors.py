"""Error taxonomy for the tax drag simulator."""


class TaxDragError(Exception):
    """Base class for every error raised by this project."""


class ConfigurationError(TaxDragError):
    """Raised when the configuration file cannot be loaded or parsed."""


class InvalidInputError(TaxDragError, ValueError):
    """Base class for input-validation failures detected before a run starts."""


class InvalidAmount(InvalidInputError):
    """A currency amount is malformed, non-finite, or negative where disallowed."""


class InvalidRate(InvalidInputError):
    """A growth or tax rate is malformed or outside its accepted range."""


class InvalidHorizon(InvalidInputError):
    """The number of years is not a positive integer or exceeds the cap."""


class OutputWriteFailure(TaxDragError):
    """The report destination could not be created or written.

    Raised after the projection itself has completed successfully.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to write output file '{path}': {reason}")
        self.path = path
        self.reason = reason
