"""
Application configuration
"""

import os
from typing import List

from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()


class Settings:
    """Application settings"""

    def __init__(self):
        self.DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
        self.HOST: str = os.getenv("HOST", "0.0.0.0")
        self.PORT_RAW: str = os.getenv("PORT", "3001")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # "*" allows any origin
        cors_origins_str = os.getenv("CORS_ORIGINS", "*")
        self.CORS_ORIGINS: List[str] = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]

        # Large inline HTML payloads are expected
        self.MAX_BODY_SIZE: int = int(os.getenv("MAX_BODY_SIZE", str(50 * 1024 * 1024)))

        browser_args_str = os.getenv("BROWSER_ARGS", "--no-sandbox,--disable-dev-shm-usage")
        self.BROWSER_ARGS: List[str] = [arg.strip() for arg in browser_args_str.split(",") if arg.strip()]

        # Authentication provider
        self.CLERK_SECRET_KEY: str = os.getenv("CLERK_SECRET_KEY", "")

    @property
    def PORT(self) -> int:
        return int(self.PORT_RAW)

    def validate(self):
        """Fail fast on configuration the server cannot run with"""
        if not self.CLERK_SECRET_KEY:
            raise ConfigurationError("Missing CLERK_SECRET_KEY environment variable")
        if not self.PORT_RAW.isdigit():
            raise ConfigurationError(f"PORT must be numeric, got {self.PORT_RAW!r}")


settings = Settings()
