"""
Error types raised by the TCO engine.

Structural problems with the input abort a calculation and surface here.
Numeric edge cases (zero denominators, missing environmental factors) are
not exceptions: they come back as explicit sentinel values in the result.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class FieldError:
    """A single field-level problem with an input configuration."""

    field: str
    message: str
    suggestion: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"field": self.field, "message": self.message}
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


class TCOError(ValueError):
    """Base class for all engine errors."""


class ConfigurationError(TCOError):
    """Input configuration rejected; carries field-level details."""

    def __init__(self, errors: Sequence[FieldError], message: str = None):
        self.errors: List[FieldError] = list(errors)
        if message is None:
            message = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(message)


class ConfigurationIncomplete(ConfigurationError):
    """Required fields for the chosen input method are missing or non-positive."""


class ConfigurationOutOfRange(ConfigurationError):
    """A numeric input lies outside its permitted bounds."""


class CatalogLookupMissing(TCOError):
    """A referenced equipment or price entry does not exist in the catalog."""

    def __init__(self, category: str, subcategory: str, currency: str):
        self.category = category
        self.subcategory = subcategory
        self.currency = currency
        super().__init__(
            f"No catalog pricing for {category}/{subcategory} in {currency}"
        )


class CalculationError(TCOError):
    """A non-finite number reached the result."""
