from __future__ import annotations

import logging

from iconsync.core.config import MonochromeConfig, OptimizeConfig
from iconsync.sync.models import RemoteItem

from .components import find_components
from .figma_client import FigmaClient
from .svg_cleanup import clean_svg

logger = logging.getLogger("figma")


class FigmaSource:
    """Remote side of a sync: icons found in one Figma frame."""

    def __init__(
        self,
        client: FigmaClient,
        file_id: str,
        node_id: str,
        monochrome: MonochromeConfig,
        optimize_cfg: OptimizeConfig,
        image_batch_size: int = 100,
    ):
        self.client = client
        self.file_id = file_id
        self.node_id = node_id
        self.monochrome = monochrome
        self.optimize_cfg = optimize_cfg
        self.image_batch_size = image_batch_size

    def list_items(self) -> list[RemoteItem]:
        children = self.client.get_frame_children(self.file_id, self.node_id)
        items = find_components(children)
        logger.info("frame_scanned %d icons in %s/%s", len(items), self.file_id, self.node_id)
        return items

    def _image_urls(self, ids: list[str]) -> dict[str, str]:
        urls: dict[str, str] = {}
        for start in range(0, len(ids), self.image_batch_size):
            urls.update(self.client.get_image_urls(self.file_id, ids[start:start + self.image_batch_size]))
        return urls

    def fetch_contents(self, items: list[RemoteItem]) -> dict[str, bytes]:
        """Download and clean every item, one at a time; any failure raises."""
        urls = self._image_urls([item.identifier for item in items])

        out: dict[str, bytes] = {}
        total = len(items)
        for index, item in enumerate(items, start=1):
            logger.info("downloading %d/%d %s", index, total, item.name)
            raw = self.client.download(urls[item.identifier])
            out[item.identifier] = clean_svg(raw, self.monochrome, self.optimize_cfg)
        return out
