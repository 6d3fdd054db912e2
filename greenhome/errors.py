from typing import Optional


class ValidationError(Exception):
    """A required request field is missing, empty or malformed."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        self.message = message or f"Missing required field: {field}"
        super().__init__(self.message)


class NotFoundError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
