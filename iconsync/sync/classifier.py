from __future__ import annotations

from typing import Iterable, Optional

from .file_store import FileStore, NamingPolicy
from .models import Category, Changelog, LocalRecord, ReconciledItem, RemoteItem


class ChangeClassifier:
    """Sorts remote icons into change categories against the local inventory."""

    def __init__(self, store: FileStore, naming: NamingPolicy):
        self.store = store
        self.naming = naming

    def _on_disk(self, name: str) -> bool:
        return self.store.exists(self.naming.path_for(name))

    def classify(
        self,
        remote_items: Iterable[RemoteItem],
        local_records: Optional[list[LocalRecord]],
        force_all: bool = False,
    ) -> Changelog:
        changelog = Changelog()
        remote_by_id: dict[str, RemoteItem] = {}
        for remote in remote_items:
            # The first occurrence of an identifier wins.
            remote_by_id.setdefault(remote.identifier, remote)

        if force_all or local_records is None:
            for remote in remote_by_id.values():
                changelog.add(_added(remote))
            return changelog

        local_by_id = {record.identifier: record for record in local_records}

        for remote in remote_by_id.values():
            local = local_by_id.get(remote.identifier)
            if local is None:
                changelog.add(_added(remote))
                continue

            previous_names = list(local.previous_names)
            is_renamed = False
            if local.name != remote.name:
                if local.name not in previous_names:
                    previous_names.append(local.name)
                is_renamed = True

            on_disk = self._on_disk(local.name)
            if remote.content_hash == local.content_hash:
                category = Category.UNMODIFIED if on_disk else Category.RESTORED
            else:
                category = Category.MODIFIED if on_disk else Category.RESTORED

            changelog.add(
                ReconciledItem(
                    identifier=remote.identifier,
                    name=remote.name,
                    content_hash=remote.content_hash,
                    category=category,
                    previous_names=previous_names,
                    is_renamed=is_renamed,
                )
            )

        for record in local_by_id.values():
            if record.identifier in remote_by_id:
                continue
            # Records whose file is already gone are forgotten here.
            if not self._on_disk(record.name):
                continue
            changelog.add(
                ReconciledItem(
                    identifier=record.identifier,
                    name=record.name,
                    content_hash=record.content_hash,
                    category=Category.REMOVED,
                    previous_names=list(record.previous_names),
                )
            )

        return changelog


def _added(remote: RemoteItem) -> ReconciledItem:
    return ReconciledItem(
        identifier=remote.identifier,
        name=remote.name,
        content_hash=remote.content_hash,
        category=Category.ADDED,
    )
