from .figma_client import FigmaClient, extract_ids_from_link
from .source import FigmaSource

__all__ = ["FigmaClient", "FigmaSource", "extract_ids_from_link"]
