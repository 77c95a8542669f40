"""
Utility functions
"""

import io
import ipaddress
import json
import re
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlparse

from PIL import Image

_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# Code points a URL host may not contain
_FORBIDDEN_HOST_CHARS = frozenset(" #%/:<>?@[\\]^|\x7f")

_FORM_KEY = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_FORM_KEY_PART = re.compile(r"\[([^\[\]]*)\]")


def is_valid_url(url: Any) -> bool:
    """Accept absolute URLs only (scheme and host)"""
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url.strip())
        # Raises for non-numeric or out of range ports
        parsed.port
    except ValueError:
        return False
    if not parsed.scheme or not parsed.hostname:
        return False
    return _is_valid_host(parsed.hostname, bracketed="[" in parsed.netloc)


def _is_valid_host(hostname: str, bracketed: bool) -> bool:
    if bracketed:
        try:
            return ipaddress.ip_address(hostname).version == 6
        except ValueError:
            return False
    return not any(char in _FORBIDDEN_HOST_CHARS or ord(char) < 0x20 for char in hostname)


def script_safe_json(value: Dict[str, Any]) -> str:
    """Serialize to JSON that cannot close the surrounding <script> tag"""
    encoded = json.dumps(value, ensure_ascii=False)
    for char, escape in _SCRIPT_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def image_dimensions(image_bytes: bytes) -> Optional[Tuple[int, int]]:
    """Width and height of an encoded image, None if Pillow cannot read it"""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return image.width, image.height
    except (OSError, ValueError):
        return None


def parse_form_body(raw: bytes) -> Dict[str, Any]:
    """
    Decode an urlencoded body into a dict.

    Bracketed keys nest, so options[width]=800&state[stars]=4 becomes
    {"options": {"width": "800"}, "state": {"stars": "4"}}. Values stay strings.
    """
    data: Dict[str, Any] = {}
    for key, value in parse_qsl(raw.decode("utf-8", errors="replace"), keep_blank_values=True):
        match = _FORM_KEY.match(key)
        if not match:
            data[key] = value
            continue
        path = [match.group(1)] + _FORM_KEY_PART.findall(match.group(2))
        target = data
        for part in path[:-1]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[path[-1]] = value
    return data
