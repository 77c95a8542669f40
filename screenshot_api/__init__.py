"""Screenshot API: renders URLs or HTML snippets in Chromium and returns the image"""

__version__ = "1.0.0"
