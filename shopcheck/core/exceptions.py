class ShopcheckError(Exception):
    """Base class for suite errors."""


class ConfigurationError(ShopcheckError, KeyError):
    """Raised for unknown element keys or device profiles."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ResolutionTimeout(ShopcheckError, AssertionError):
    """Raised when a required element never became visible within its budget."""


class SignalTimeout(ShopcheckError, AssertionError):
    """Raised when none of the racing success signals fired in time."""
