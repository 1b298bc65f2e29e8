"""Error taxonomy for spectral similarity search.

ConfigurationError and DataAccessError abort a search run before any match
is returned. DegenerateInputWarning is informational only: degenerate
comparisons resolve to MIN_SIMILARITY and the run continues.
"""


class SpecSimError(Exception):
    """Base class for all errors raised by specsimfast."""


class ConfigurationError(SpecSimError, ValueError):
    """Invalid search settings (unknown strategy kind or out-of-range value)."""


class DataAccessError(SpecSimError, IOError):
    """Candidate store failure (connectivity, missing experiment, bad record)."""


class DegenerateInputWarning(UserWarning):
    """Some comparisons had empty, zero-norm or zero-variance vectors."""
