"""Exception types for alias-split."""


class AliasSplitError(Exception):
    """Base class for all alias-split errors."""
    pass


class ConfigError(AliasSplitError):
    """Raised when a configuration value is invalid."""
    pass


class DictionaryError(AliasSplitError):
    """Raised when a dictionary document cannot be parsed."""
    pass


class OracleError(AliasSplitError):
    """Raised by oracle implementations when a suggestion request fails."""
    pass


class OracleTimeoutError(OracleError):
    """Raised when an oracle request exceeds its time budget."""
    pass
