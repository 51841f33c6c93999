"""Advisory events raised while resolving names; never fatal."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .file_store import NamingPolicy


class EventKind(str, Enum):
    RENAMED_SAVED_BOTH = "renamed-saved-both"
    RENAMED_UNABLE_TO_SAVE = "renamed-unable-to-save"
    UNABLE_TO_SAVE = "unable-to-save"
    RENAME_REMINDER = "rename-reminder"


@dataclass(frozen=True)
class NotificationEvent:
    kind: EventKind
    message: str
    # Paths inside the output directory, old names first, new name last.
    filenames: list[str] = field(default_factory=list)
    # Structured extras for renderers: old/new icon names.
    old_names: list[str] = field(default_factory=list)
    new_name: str = ""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "filenames": list(self.filenames),
            "oldNames": list(self.old_names),
            "newName": self.new_name,
        }


def _files(names: list[str], naming: Optional[NamingPolicy]) -> list[str]:
    naming = naming or NamingPolicy()
    return [naming.path_for(name) for name in names]


def renamed_saved_both(
    new_name: str, old_names: list[str], naming: Optional[NamingPolicy] = None
) -> NotificationEvent:
    return NotificationEvent(
        kind=EventKind.RENAMED_SAVED_BOTH,
        message=(
            "The icon has been renamed. Both files have been saved, and no urgent action is required. "
            "Please update the icon's name in your codebase and then delete the old-named icon."
        ),
        filenames=_files([*old_names, new_name], naming),
        old_names=list(old_names),
        new_name=new_name,
    )


def renamed_unable_to_save(
    new_name: str, old_names: list[str], naming: Optional[NamingPolicy] = None
) -> NotificationEvent:
    return NotificationEvent(
        kind=EventKind.RENAMED_UNABLE_TO_SAVE,
        message="The icon was renamed, but a different file with the target name already exists.",
        filenames=_files([*old_names, new_name], naming),
        old_names=list(old_names),
        new_name=new_name,
    )


def unable_to_save(name: str, naming: Optional[NamingPolicy] = None) -> NotificationEvent:
    [filename] = _files([name], naming)
    return NotificationEvent(
        kind=EventKind.UNABLE_TO_SAVE,
        message=f"A different file named '{filename}' already exists.",
        filenames=[filename],
        new_name=name,
    )


def rename_reminder(
    present_name: str, old_names: list[str], naming: Optional[NamingPolicy] = None
) -> NotificationEvent:
    return NotificationEvent(
        kind=EventKind.RENAME_REMINDER,
        message="Rename the icon in your codebase to match the new name and delete the old icon.",
        filenames=_files([*old_names, present_name], naming),
        old_names=list(old_names),
        new_name=present_name,
    )
