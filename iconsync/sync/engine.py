from __future__ import annotations

import json
import logging
from typing import Callable, Optional, Protocol

from iconsync.core.config import SyncConfig
from iconsync.core.errors import RemoteError

from .classifier import ChangeClassifier
from .events import NotificationEvent
from .file_store import FileStore, NamingPolicy
from .inventory import InventoryStore
from .models import Category, Changelog, LocalRecord, ReconciledItem, RemoteItem, RunResult, SaveAction
from .resolver import ConflictResolver

LogFunc = Callable[[str, str, str, Optional[str]], None]


class RemoteSource(Protocol):
    def list_items(self) -> list[RemoteItem]: ...

    def fetch_contents(self, items: list[RemoteItem]) -> dict[str, bytes]: ...


def _default_log(level: str, module: str, message: str, detail: Optional[str] = None):
    logging.getLogger(module).log(
        getattr(logging, level.upper(), logging.INFO),
        f"{message} {detail or ''}".strip(),
    )


class SyncEngine:
    """
    One reconciliation run: list remote icons, classify them against the
    inventory, download what changed, resolve names, write files and persist
    the inventory.

    Any exception propagates before the inventory file is rewritten, so a
    failed run leaves the previous inventory untouched.
    """

    def __init__(
        self,
        cfg: SyncConfig,
        source: RemoteSource,
        store: FileStore,
        log_func: Optional[LogFunc] = None,
    ):
        self.cfg = cfg
        self.source = source
        self.store = store
        self.log_func = log_func or _default_log

        self.naming = NamingPolicy(ignore_subfolders=cfg.ignore_subfolders)
        self.inventory = InventoryStore(store, cfg.inventory_file, cfg.legacy_inventory_file)
        self.classifier = ChangeClassifier(store, self.naming)

    def _log(self, level: str, module: str, message: str, detail: Optional[dict] = None):
        self.log_func(level, module, message, json.dumps(detail, ensure_ascii=False) if detail else None)

    def _read_local(self, item: ReconciledItem) -> Optional[bytes]:
        # Last existing file wins. The current name wins over older ones,
        # except for a fresh rename whose target may be an unrelated file.
        names = [*item.previous_names, item.name]
        if item.is_renamed:
            names = [item.name, *item.previous_names]
        content = None
        for name in names:
            path = self.naming.path_for(name)
            if self.store.exists(path):
                content = self.store.read(path)
        return content

    def _write(self, action: SaveAction):
        self.store.ensure_dir(self.naming.dir_for(action.target_name))
        self.store.write(self.naming.path_for(action.target_name), action.content)

    def _download(self, items: list[ReconciledItem]) -> dict[str, bytes]:
        if not items:
            return {}
        self._log("INFO", "sync", "download_started", {"total": len(items)})
        fetched = self.source.fetch_contents(
            [RemoteItem(item.identifier, item.name, item.content_hash) for item in items]
        )
        missing = [item.identifier for item in items if item.identifier not in fetched]
        if missing:
            raise RemoteError("content_missing", details={"ids": missing})
        return fetched

    def run_once(self, force_all: bool = False) -> RunResult:
        self.inventory.migrate_legacy()

        self._log("INFO", "sync", "scan_started")
        remote_items = self.source.list_items()
        local_records = self.inventory.load()
        changelog = self.classifier.classify(remote_items, local_records, force_all=force_all)
        self._log("INFO", "sync", "scan_done", _counts(changelog))

        to_fetch = changelog.to_fetch()
        fetched = self._download(to_fetch)

        reused = changelog.to_reuse()
        for item in reused:
            item.content = self._read_local(item)

        resolver = ConflictResolver(self.store, self.naming, force_all=force_all)
        survivors: list[LocalRecord] = []
        events: list[NotificationEvent] = []
        written = 0

        self.store.ensure_dir("")
        for item in [*to_fetch, *reused]:
            resolution = resolver.resolve(item, fetched.get(item.identifier))
            events.extend(resolution.events)
            if not resolution.keep:
                self._log("DEBUG", "sync", "item_dropped", {"id": item.identifier, "name": item.name})
                continue
            for action in resolution.actions:
                self._write(action)
                written += 1
            survivors.append(item.to_record())

        self.inventory.save(survivors)

        for event in events:
            # Advisory only; callers render RunResult.events themselves.
            self._log("DEBUG", "sync", event.kind.value, {"files": event.filenames})

        result = RunResult(
            changelog={
                category.value: [self.naming.path_for(item.name) for item in changelog.bucket(category)]
                for category in Category
            },
            total_fetches=len(to_fetch),
            events=events,
        )
        self._log(
            "INFO",
            "sync",
            "run_success",
            {"written": written, "records": len(survivors), "fetches": result.total_fetches},
        )
        return result


def _counts(changelog: Changelog) -> dict[str, int]:
    return {category.value: len(changelog.bucket(category)) for category in Category}
