"""Argument checks shared by the forks clients."""


class InvalidArgumentError(ValueError):
    """Raised when a required argument is missing or empty."""

    def __init__(self, param_name: str, message: str | None = None):
        self.param_name = param_name
        super().__init__(message or f"Argument '{param_name}' is invalid")


def argument_not_null(value, name: str) -> None:
    if value is None:
        raise InvalidArgumentError(name, f"Argument '{name}' must not be None")


def argument_not_null_or_empty_string(value: str | None, name: str) -> None:
    argument_not_null(value, name)
    if not value.strip():
        raise InvalidArgumentError(name, f"Argument '{name}' must not be an empty string")
