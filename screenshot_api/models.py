from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SELECTOR = "#review-card"


class ScreenshotOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    width: int = Field(1920, gt=0)
    height: int = Field(1080, gt=0)
    full_page: bool = Field(False, alias="fullPage")
    selector: Optional[str] = DEFAULT_SELECTOR
    selector_timeout: Optional[float] = Field(None, alias="selectorTimeout", ge=0)
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field("networkidle", alias="waitUntil")
    timeout: float = Field(30000, ge=0)  # ms
    quality: int = Field(100, ge=0, le=100)  # jpeg only
    type: Literal["png", "jpeg"] = "png"
    device_scale_factor: float = Field(2, alias="deviceScaleFactor", gt=0)
    transparent: bool = True  # forces png
    headless: bool = True

    @property
    def image_type(self) -> str:
        return "png" if self.transparent else self.type

    @property
    def content_type(self) -> str:
        return "image/jpeg" if self.image_type == "jpeg" else "image/png"

    @property
    def effective_selector_timeout(self) -> float:
        if self.selector_timeout is not None:
            return self.selector_timeout
        return min(self.timeout, 10000)


class UrlScreenshotRequest(BaseModel):
    url: str
    options: ScreenshotOptions = Field(default_factory=ScreenshotOptions)


class HtmlScreenshotRequest(BaseModel):
    html: str
    css: str = ""
    state: Dict[str, Any] = Field(default_factory=dict)
    options: ScreenshotOptions = Field(default_factory=ScreenshotOptions)


class SelectorLookup(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    NOT_VISIBLE = "not_visible"


class HealthStatus(BaseModel):
    status: str = "ok"
    message: str = "Screenshot API is running"
