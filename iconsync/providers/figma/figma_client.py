import re
from typing import Any
from urllib.parse import urlencode

import requests

from iconsync.core.errors import ConfigError, RemoteError

BASE = "https://api.figma.com/v1"

FIGMA_LINK_RE = re.compile(
    r"figma\.com/(?:file|design)/(\w+)(?:/[^?#]*)?\?(?:[^#]*&)?node-id=(\d+)(?:-|:|%3A)(\d+)",
    re.IGNORECASE,
)


def extract_ids_from_link(link: str) -> tuple[str, str]:
    """Return ``(file_id, node_id)`` from a link to a frame; node id uses ``-``."""
    match = FIGMA_LINK_RE.search((link or "").strip())
    if not match:
        raise ConfigError("figma_link_invalid: provide a link directly to a frame", details={"link": link})
    return match.group(1), f"{match.group(2)}-{match.group(3)}"


class FigmaClient:
    def __init__(self, api_token: str, timeout: int = 30, base: str = BASE):
        if not api_token:
            raise ConfigError("api_token_missing")
        self.api_token = api_token
        self.timeout = timeout
        self.base = base.rstrip("/")

    def _get(self, url: str, *, auth: bool = True) -> requests.Response:
        headers = {"X-Figma-Token": self.api_token} if auth else {}
        try:
            res = requests.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteError(f"request_failed: {url}", details={"error": str(e)}) from e
        if res.status_code >= 400:
            raise RemoteError(
                f"request_failed_status_{res.status_code}: {url}",
                details={"status_code": res.status_code, "body": (res.text or "")[:200]},
            )
        return res

    def _get_json(self, url: str) -> dict[str, Any]:
        res = self._get(url)
        try:
            payload = res.json()
        except ValueError as e:
            raise RemoteError(f"invalid_response: {url}") from e
        if not isinstance(payload, dict):
            raise RemoteError(f"invalid_response: {url}")
        if payload.get("err"):
            raise RemoteError(f"figma_error: {payload.get('err')}", details={"status": payload.get("status")})
        return payload

    def get_frame_children(self, file_id: str, node_id: str) -> list[dict[str, Any]]:
        query = urlencode({"ids": node_id, "geometry": "paths"})
        payload = self._get_json(f"{self.base}/files/{file_id}/nodes?{query}")

        nodes = payload.get("nodes")
        key = node_id.replace("-", ":")
        node = nodes.get(key) if isinstance(nodes, dict) else None
        document = node.get("document") if isinstance(node, dict) else None
        if not isinstance(document, dict):
            raise RemoteError("frame_not_found", details={"file_id": file_id, "node_id": key})
        children = document.get("children") or []
        if not isinstance(children, list):
            raise RemoteError("invalid_response_children", details={"node_id": key})
        return [child for child in children if isinstance(child, dict)]

    def get_image_urls(self, file_id: str, node_ids: list[str], fmt: str = "svg") -> dict[str, str]:
        if not node_ids:
            return {}
        query = urlencode({"ids": ",".join(node_ids), "format": fmt})
        payload = self._get_json(f"{self.base}/images/{file_id}?{query}")

        images = payload.get("images")
        if not isinstance(images, dict):
            raise RemoteError("invalid_response_images", details={"file_id": file_id})
        urls: dict[str, str] = {}
        for node_id in node_ids:
            url = images.get(node_id)
            if not isinstance(url, str) or not url:
                raise RemoteError("image_url_missing", details={"node_id": node_id})
            urls[node_id] = url
        return urls

    def download(self, url: str) -> bytes:
        # Export URLs are pre-signed links outside the API host.
        return self._get(url, auth=False).content
