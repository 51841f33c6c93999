from __future__ import annotations

from typing import Optional

from . import events
from .file_store import FileStore, NamingPolicy
from .models import Category, ReconciledItem, Resolution, SaveAction


class ConflictResolver:
    """
    Decides which files to write for one classified icon.

    Rename handling takes precedence over the category. Writes are always
    additive: an old-named file is kept alongside the new one until a human
    removes it, and a file that belongs to something else is never overwritten.
    The item's ``name`` and ``previous_names`` are updated in place.
    """

    def __init__(self, store: FileStore, naming: NamingPolicy, force_all: bool = False):
        self.store = store
        self.naming = naming
        # A forced run rewrites everything, so name collisions are not checked.
        self.force_all = force_all

    def _exists(self, name: str) -> bool:
        return self.store.exists(self.naming.path_for(name))

    def _collides(self, name: str, content: Optional[bytes]) -> bool:
        if self.force_all or not self._exists(name):
            return False
        return self.store.read(self.naming.path_for(name)) != content

    def _save_all(self, names: list[str], content: Optional[bytes]) -> list[SaveAction]:
        if content is None:
            return []
        return [SaveAction(target_name=name, content=content) for name in names if name]

    def resolve(self, item: ReconciledItem, fetched_content: Optional[bytes] = None) -> Resolution:
        content = fetched_content if fetched_content is not None else item.content
        item.content = content

        if item.is_renamed:
            return self._resolve_renamed(item, content)

        if item.category is Category.ADDED:
            if self._collides(item.name, content):
                return Resolution(events=[events.unable_to_save(item.name, self.naming)], keep=False)
            return Resolution(actions=self._save_all([item.name], content))

        item.previous_names = [
            name for name in item.previous_names if name != item.name and self._exists(name)
        ]
        out = Resolution()
        if item.previous_names:
            out.events.append(events.rename_reminder(item.name, list(item.previous_names), self.naming))
        if item.category not in (Category.UNMODIFIED, Category.REMOVED):
            out.actions = self._save_all([item.name, *item.previous_names], content)
        return out

    def _resolve_renamed(self, item: ReconciledItem, content: Optional[bytes]) -> Resolution:
        old_names = [name for name in item.previous_names if name != item.name]

        # Renamed back to a name used before.
        if item.name in item.previous_names:
            item.previous_names = old_names
            return Resolution(
                actions=self._save_all([item.name, *item.previous_names], content),
                events=[events.renamed_saved_both(item.name, old_names, self.naming)],
            )

        if self._collides(item.name, content):
            wanted = item.name
            item.name = item.previous_names.pop()
            return Resolution(events=[events.renamed_unable_to_save(wanted, old_names, self.naming)])

        return Resolution(
            actions=self._save_all([item.name, *item.previous_names], content),
            events=[events.renamed_saved_both(item.name, old_names, self.naming)],
        )
