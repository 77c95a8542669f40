"""
Exceptions raised by the screenshot API
"""


class ScreenshotError(Exception):
    """Base class for screenshot API errors"""


class ConfigurationError(ScreenshotError):
    """Configuration is missing or malformed"""


class ValidationError(ScreenshotError):
    """Request body was rejected before any browser work happened"""

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error
        self.message = message

    def to_dict(self):
        return {"error": self.error, "message": self.message}


class CaptureError(ScreenshotError):
    """The browser could not produce the requested image"""


class PayloadTooLarge(ScreenshotError):
    """Request body is bigger than the configured limit"""

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit

    def to_dict(self):
        return {"error": "Payload too large", "message": str(self)}
