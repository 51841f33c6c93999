"""Data model shared by the classifier, resolver and orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .events import NotificationEvent


class Category(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    RESTORED = "restored"
    UNMODIFIED = "unmodified"
    REMOVED = "removed"


# Categories whose content is fetched from Figma; the rest reuse local bytes.
FETCH_CATEGORIES: tuple[Category, ...] = (Category.ADDED, Category.MODIFIED, Category.RESTORED)


@dataclass(frozen=True)
class RemoteItem:
    """One icon as reported by the remote listing."""

    identifier: str
    name: str
    content_hash: str


class LocalRecord(BaseModel):
    """
    Persisted inventory entry.

    Serialized with the keys used by existing inventory files
    (``nodeId``, ``name``, ``previousNames``, ``hash``).
    """

    model_config = ConfigDict(populate_by_name=True)

    identifier: str = Field(alias="nodeId", min_length=1)
    name: str = Field(min_length=1)
    previous_names: list[str] = Field(default_factory=list, alias="previousNames")
    content_hash: str = Field(alias="hash")

    @field_validator("name")
    @classmethod
    def _name_inside_output(cls, value: str) -> str:
        return check_icon_name(value)

    @field_validator("previous_names")
    @classmethod
    def _previous_names_inside_output(cls, value: list[str]) -> list[str]:
        return [check_icon_name(name) for name in value if name]

    @model_validator(mode="after")
    def _normalize_previous_names(self) -> "LocalRecord":
        self.previous_names = clean_previous_names(self.name, self.previous_names)
        return self


@dataclass
class ReconciledItem:
    """Remote and local views of one icon merged for the duration of a run."""

    identifier: str
    name: str
    content_hash: str
    category: Category
    previous_names: list[str] = field(default_factory=list)
    is_renamed: bool = False
    content: Optional[bytes] = None

    def to_record(self) -> LocalRecord:
        return LocalRecord(
            identifier=self.identifier,
            name=self.name,
            previous_names=list(self.previous_names),
            content_hash=self.content_hash,
        )


@dataclass
class Changelog:
    added: list[ReconciledItem] = field(default_factory=list)
    modified: list[ReconciledItem] = field(default_factory=list)
    restored: list[ReconciledItem] = field(default_factory=list)
    unmodified: list[ReconciledItem] = field(default_factory=list)
    removed: list[ReconciledItem] = field(default_factory=list)

    def bucket(self, category: Category) -> list[ReconciledItem]:
        return getattr(self, category.value)

    def add(self, item: ReconciledItem) -> None:
        self.bucket(item.category).append(item)

    def to_fetch(self) -> list[ReconciledItem]:
        return [item for category in FETCH_CATEGORIES for item in self.bucket(category)]

    def to_reuse(self) -> list[ReconciledItem]:
        return [*self.unmodified, *self.removed]


@dataclass(frozen=True)
class SaveAction:
    target_name: str
    content: bytes


@dataclass
class Resolution:
    actions: list[SaveAction] = field(default_factory=list)
    events: list[NotificationEvent] = field(default_factory=list)
    # False when the item must not be written to the inventory this run.
    keep: bool = True


@dataclass
class RunResult:
    changelog: dict[str, list[str]]
    total_fetches: int
    events: list[NotificationEvent] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "changelog": {key: list(names) for key, names in self.changelog.items()},
            "totalFetches": self.total_fetches,
            "events": [event.to_dict() for event in self.events],
        }


def clean_previous_names(name: str, previous_names: list[str]) -> list[str]:
    """Drop duplicates and the current name while keeping history order."""
    out: list[str] = []
    for prev in previous_names:
        if prev and prev != name and prev not in out:
            out.append(prev)
    return out


def check_icon_name(name: str) -> str:
    """Reject names that would resolve outside the output directory."""
    path = PurePosixPath(name)
    if path.is_absolute() or "\\" in name or any(part in ("..", ".") for part in name.split("/")):
        raise ValueError(f"icon name must stay inside the output directory: {name!r}")
    return name
