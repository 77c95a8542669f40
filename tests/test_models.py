import pytest
from pydantic import ValidationError

from screenshot_api.models import HtmlScreenshotRequest, ScreenshotOptions


def test_defaults():
    options = ScreenshotOptions()

    assert (options.width, options.height) == (1920, 1080)
    assert options.full_page is False
    assert options.selector == "#review-card"
    assert options.wait_until == "networkidle"
    assert options.timeout == 30000
    assert options.quality == 100
    assert options.type == "png"
    assert options.device_scale_factor == 2
    assert options.transparent is True
    assert options.headless is True


def test_camel_case_payload():
    options = ScreenshotOptions.model_validate({
        "fullPage": True,
        "selectorTimeout": 1500,
        "waitUntil": "domcontentloaded",
        "deviceScaleFactor": 1,
        "unknownField": "ignored",
    })

    assert options.full_page is True
    assert options.selector_timeout == 1500
    assert options.wait_until == "domcontentloaded"
    assert options.device_scale_factor == 1


def test_effective_type():
    assert ScreenshotOptions(type="jpeg").image_type == "png"
    assert ScreenshotOptions(type="jpeg").content_type == "image/png"
    assert ScreenshotOptions(type="jpeg", transparent=False).content_type == "image/jpeg"
    assert ScreenshotOptions(transparent=False).content_type == "image/png"


def test_selector_timeout_default_is_capped():
    assert ScreenshotOptions().effective_selector_timeout == 10000
    assert ScreenshotOptions(timeout=4000).effective_selector_timeout == 4000
    assert ScreenshotOptions(selectorTimeout=0).effective_selector_timeout == 0


@pytest.mark.parametrize("payload", [
    {"quality": 101},
    {"type": "gif"},
    {"waitUntil": "idle"},
    {"width": 0},
])
def test_rejects_bad_options(payload):
    with pytest.raises(ValidationError):
        ScreenshotOptions.model_validate(payload)


def test_html_request_defaults():
    request = HtmlScreenshotRequest(html="<p></p>")
    assert request.css == ""
    assert request.state == {}
    assert request.options == ScreenshotOptions()
