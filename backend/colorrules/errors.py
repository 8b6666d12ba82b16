"""
Exception types raised by the color rule engine and its persistence layer.
"""


class ColorRuleError(Exception):
    """Base class for color rule errors."""


class RuleDecodeError(ColorRuleError, ValueError):
    """Stored rule text could not be parsed into rules."""


class RuleEncodeError(ColorRuleError, ValueError):
    """A rule list could not be serialized."""


class UnresolvableColumnError(ColorRuleError, ValueError):
    """A rule targets a column that is neither in the schema nor an admin column."""

    def __init__(self, element_key: str):
        self.element_key = element_key
        super().__init__(
            f"Rule column '{element_key}' has no column definition and is not an admin column"
        )


class RuleSaveError(ColorRuleError, RuntimeError):
    """A rule group could not be persisted; the transaction was rolled back."""


class StoreUnavailableError(ColorRuleError, RuntimeError):
    """The key-value store could not be opened or a transaction failed."""
