"""
Pricing Errors
==============
Exceptions raised while building the pricing store or parsing provider payloads.

Calculation paths never raise: unknown identifiers, clamped inputs and
overflow are reported in-band on the result objects.
"""

from typing import Optional


class PricingError(Exception):
    """Base class for all pricing errors."""


class LoadError(PricingError):
    """The pricing store could not be built. Nothing was loaded."""


class PricingValidationError(LoadError):
    """A pricing document contains an invalid value."""

    def __init__(
        self,
        message: str,
        document: str,
        entity: Optional[str] = None,
        field: Optional[str] = None,
    ):
        super().__init__(message)
        self.document = document
        self.entity = entity
        self.field = field


class ResponseParseError(PricingError):
    """A provider response payload could not be decoded."""
