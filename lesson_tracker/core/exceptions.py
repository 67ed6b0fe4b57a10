"""Base exception for the lesson tracker."""


class TrackerError(Exception):
    """Base tracker error."""

    def __init__(self, message: str, code: str = "tracker_error"):
        self.message = message
        self.code = code
        super().__init__(message)
