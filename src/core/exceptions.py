"""
Custom exceptions for the Substance Access API.
Provides specific error types for each failure in the resolution pipeline.
"""
from typing import Optional


class SubstanceAccessException(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class InvalidInputException(SubstanceAccessException):
    """Raised when the request carries no usable substance."""
    pass


class SubstanceNotFoundException(SubstanceAccessException):
    """Raised when a substance has no stored dataset."""
    pass


class StoreUnavailableException(SubstanceAccessException):
    """Raised when the cache store cannot be read or written."""
    pass


class StoreRejectedException(InvalidInputException):
    """Raised when the cache store refuses a value as invalid. Never retried."""
    pass


class GeneratorException(SubstanceAccessException):
    """Base for generator adapter failures."""
    pass


class GeneratorUnavailableException(GeneratorException):
    """Raised when the generation service call itself fails."""
    pass


class GeneratorEmptyResponseException(GeneratorException):
    """Raised when the generation service returns no content."""
    pass


class GeneratorMalformedOutputException(GeneratorException):
    """Raised when generator output is not a flat string-to-string JSON object."""
    pass


class NoValidRowsException(SubstanceAccessException):
    """Raised when normalization leaves no records to persist."""
    pass
