# lambdas/common/errors.py


class DoraError(Exception):
    """Base class for errors the handlers turn into an HTTP response."""
    status_code = 400
    default_message = "An error occurred."

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


# Shortcut webhook errors
class MissingShortcutFieldsError(DoraError):
    default_message = "Missing required fields in the Shortcut webhook or story data!"


class MissingIdError(DoraError):
    default_message = "Missing ID in the Shortcut webhook!"


class ShortcutConfigurationError(DoraError):
    status_code = 500

    def __init__(self, variable_name: str):
        super().__init__(f"Missing required environment variable: {variable_name}")
        self.variable_name = variable_name


class ShortcutRequestError(DoraError):
    """Raised when the story lookup against the Shortcut API fails."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


# Request validation errors
class InvalidIsoDateConversionError(DoraError):
    default_message = "Invalid date provided. Dates must be in the YYYYMMDD format."


class MissingRepoNameError(DoraError):
    default_message = "Missing required query parameter: repo"


class InvalidOffsetError(DoraError):
    default_message = "Invalid query parameter: offset must be an integer between -12 and 12."


class TooManyInputParamsError(DoraError):
    default_message = "Use either 'from' and 'to', or 'last', but not both."


class InvalidDateOrderError(DoraError):
    default_message = "The 'from' date must not be later than the 'to' date."


class OutOfRangeQueryError(DoraError):
    default_message = "The requested date range is older than the maximum allowed range."
