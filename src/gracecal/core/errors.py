"""Validation errors raised where upstream data enters the core."""


class InvalidDateError(ValueError):
    """Raised when a date or timestamp from upstream data can't be parsed."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {value!r}")


class InvalidRecordError(ValueError):
    """Raised when an upstream record doesn't have the shape the core needs."""

    pass
