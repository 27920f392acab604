"""
Error types raised by the Inventory service.
"""
from typing import Iterable, Union


class InvalidDateError(ValueError):
    """Raised when an expiry or reference date cannot be read as a calendar date."""

    def __init__(self, value, field: str = "date"):
        self.value = value
        self.field = field
        super().__init__(f"Invalid {field}: {value!r}")


class ValidationError(Exception):
    """
    Aggregate validation failure for item input.

    Attributes:
        errors (list): One human-readable message per failing field
    """

    def __init__(self, errors: Union[str, Iterable[str]]):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__(", ".join(self.errors))
