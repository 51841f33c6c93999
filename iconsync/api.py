from __future__ import annotations

from typing import Optional

from iconsync.core.config import AppConfig, load_optimize_config
from iconsync.core.errors import ConfigError
from iconsync.providers.figma import FigmaClient, FigmaSource, extract_ids_from_link
from iconsync.sync import LocalFileStore, RunResult, SyncEngine


def build_engine(cfg: AppConfig, client: Optional[FigmaClient] = None) -> SyncEngine:
    """Wire a Figma-backed engine writing into ``cfg.sync.output_dir``.

    Raises ConfigError when the token or the frame link is missing or invalid.
    """
    if client is None and not cfg.auth.api_token:
        raise ConfigError("api_token_missing: pass --token or set auth.api_token")
    if not cfg.figma.link:
        raise ConfigError("figma_link_missing: provide a link directly to a frame in the Figma file")

    file_id, node_id = extract_ids_from_link(cfg.figma.link)
    optimize_cfg = load_optimize_config(cfg.sync.optimize_config)
    if client is None:
        client = FigmaClient(cfg.auth.api_token, timeout=int(cfg.auth.timeout_sec), base=cfg.figma.api_base)
    source = FigmaSource(
        client,
        file_id,
        node_id,
        monochrome=cfg.monochrome,
        optimize_cfg=optimize_cfg,
        image_batch_size=cfg.figma.image_batch_size,
    )
    return SyncEngine(cfg.sync, source, LocalFileStore(cfg.sync.output_dir))


def run_sync(cfg: AppConfig, force: bool = False, client: Optional[FigmaClient] = None) -> RunResult:
    """Run one sync of the configured Figma frame and return its result.

    Fatal problems raise IconsSyncError subclasses; the previous inventory is
    left untouched in that case. Advisory events are in ``RunResult.events``.
    """
    return build_engine(cfg, client).run_once(force_all=force)
