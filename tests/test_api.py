import json
from pathlib import Path

import pytest

import iconsync
from iconsync.core.config import AppConfig, FigmaConfig, SyncConfig
from iconsync.core.errors import ConfigError, RemoteError

LINK = "https://www.figma.com/design/AbC123/Icons?node-id=1-2"


class _FakeFigmaClient:
    def __init__(self):
        self.downloads: list[str] = []
        self.children = [
            {
                "id": "10:1",
                "type": "COMPONENT",
                "name": "Arrow Left",
                "children": [{"type": "VECTOR", "fillGeometry": [{"path": "M0 0"}], "fills": []}],
            }
        ]

    def get_frame_children(self, file_id, node_id):
        assert (file_id, node_id) == ("AbC123", "1-2")
        return self.children

    def get_image_urls(self, file_id, node_ids, fmt="svg"):
        return {node_id: f"https://cdn.example/{node_id}.svg" for node_id in node_ids}

    def download(self, url):
        self.downloads.append(url)
        return b'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><path d="M0 0h24v24H0z"/></svg>'


def _cfg(tmp_path: Path, link: str = LINK) -> AppConfig:
    return AppConfig(figma=FigmaConfig(link=link), sync=SyncConfig(output_dir=str(tmp_path)))


def test_run_sync_returns_result_and_writes_files(tmp_path: Path):
    client = _FakeFigmaClient()

    result = iconsync.run_sync(_cfg(tmp_path), client=client)

    assert result.changelog["added"] == ["arrow-left.svg"]
    assert result.total_fetches == 1
    assert (tmp_path / "arrow-left.svg").read_bytes().startswith(b"<svg")
    assert json.loads((tmp_path / "_icons.json").read_text(encoding="utf-8"))[0]["nodeId"] == "10:1"


def test_run_sync_is_idempotent_and_force_refetches(tmp_path: Path):
    client = _FakeFigmaClient()
    iconsync.run_sync(_cfg(tmp_path), client=client)

    again = iconsync.run_sync(_cfg(tmp_path), client=client)
    forced = iconsync.run_sync(_cfg(tmp_path), force=True, client=client)

    assert again.total_fetches == 0
    assert again.changelog["unmodified"] == ["arrow-left.svg"]
    assert forced.changelog["added"] == ["arrow-left.svg"]
    assert len(client.downloads) == 2


def test_run_sync_requires_token_without_client(tmp_path: Path):
    with pytest.raises(ConfigError, match="api_token_missing"):
        iconsync.run_sync(_cfg(tmp_path))


@pytest.mark.parametrize(("link", "code"), [("", "figma_link_missing"), ("https://example.com", "figma_link_invalid")])
def test_run_sync_validates_link(tmp_path: Path, link: str, code: str):
    with pytest.raises(ConfigError, match=code):
        iconsync.run_sync(_cfg(tmp_path, link=link), client=_FakeFigmaClient())


def test_run_sync_propagates_remote_errors(tmp_path: Path):
    client = _FakeFigmaClient()
    client.children = [{"type": "COMPONENT", "name": "no id"}]

    with pytest.raises(RemoteError):
        iconsync.run_sync(_cfg(tmp_path), client=client)

    assert not (tmp_path / "_icons.json").exists()
