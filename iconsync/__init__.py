"""Keep a local folder of SVG icons in sync with a Figma frame."""

__version__ = "1.2.0"

from iconsync.api import run_sync  # noqa: E402

__all__ = ["__version__", "run_sync"]
