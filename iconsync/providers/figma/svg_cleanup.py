from __future__ import annotations

import re
from xml.parsers.expat import ExpatError

from scour import scour

from iconsync.core.config import MonochromeConfig, OptimizeConfig
from iconsync.core.errors import RemoteError

COLOR_ATTR_RE = re.compile(r'\s?(?:fill|stroke)="#?([\w]+)(?<!none)"')
FILL_ATTR_RE = re.compile(r'\s?fill="#?([\w]+)(?<!none)"')
STROKE_ATTR_RE = re.compile(r'\s?stroke="#?([\w]+)(?<!none)"')


def unique_colors(svg: str) -> list[str]:
    out: list[str] = []
    for match in COLOR_ATTR_RE.finditer(svg):
        color = match.group(1)
        if color not in out:
            out.append(color)
    return out


def is_monochrome(svg: str, colors: list[str]) -> bool:
    found = unique_colors(svg)
    return len(found) == 1 and found[0] in colors


def strip_monochrome(svg: str, cfg: MonochromeConfig) -> str:
    """Drop the single paint colour so the icon inherits ``currentColor``."""
    if not is_monochrome(svg, cfg.colors):
        return svg
    if cfg.remove_fill:
        svg = FILL_ATTR_RE.sub("", svg)
    if cfg.remove_stroke:
        svg = STROKE_ATTR_RE.sub("", svg)
    return svg


def scour_options(cfg: OptimizeConfig):
    options = scour.sanitizeOptions()
    for key, value in cfg.model_dump().items():
        setattr(options, key, value)
    options.quiet = True
    return options


def optimize(svg: str, cfg: OptimizeConfig) -> str:
    try:
        out = scour.scourString(svg, scour_options(cfg))
    except ExpatError as e:
        raise RemoteError("svg_invalid", details={"error": str(e)}) from e
    return out.strip()


def clean_svg(raw: bytes, monochrome: MonochromeConfig, optimize_cfg: OptimizeConfig) -> bytes:
    try:
        svg = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RemoteError("svg_not_utf8") from e
    # Colours are matched on the raw export, before scour rewrites them.
    svg = strip_monochrome(svg, monochrome)
    return optimize(svg, optimize_cfg).encode("utf-8")
