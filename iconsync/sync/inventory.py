from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError

from iconsync.core.errors import InventoryError

from .file_store import FileStore
from .models import LocalRecord

logger = logging.getLogger("inventory")


def _parse_records(raw: bytes, source: str) -> list[LocalRecord]:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise InventoryError(f"inventory_invalid_json: {source}", details={"error": str(e)}) from e
    if not isinstance(payload, list):
        raise InventoryError(f"inventory_not_a_list: {source}")

    records: list[LocalRecord] = []
    for index, entry in enumerate(payload):
        try:
            records.append(LocalRecord.model_validate(entry))
        except ValidationError as e:
            raise InventoryError(
                f"inventory_record_invalid: {source}",
                details={"index": index, "errors": e.errors(include_url=False)},
            ) from e
    return records


class InventoryStore:
    """The JSON file listing every icon synced so far."""

    def __init__(self, store: FileStore, filename: str = "_icons.json", legacy_filename: str = "_icons.js"):
        self.store = store
        self.filename = filename
        self.legacy_filename = legacy_filename

    def exists(self) -> bool:
        return self.store.exists(self.filename)

    def load(self) -> Optional[list[LocalRecord]]:
        """Return the stored records, or None on the very first run."""
        if not self.store.exists(self.filename):
            return None
        return _parse_records(self.store.read(self.filename), self.filename)

    def save(self, records: list[LocalRecord]) -> None:
        payload = [record.model_dump(by_alias=True) for record in records]
        self.store.ensure_dir("")
        self.store.write(self.filename, json.dumps(payload, ensure_ascii=False).encode("utf-8"))

    def migrate_legacy(self) -> bool:
        """Move a legacy-named inventory into place; best-effort.

        Only runs when the legacy file exists and the current one does not.
        Returns True when a migration happened.
        """
        if not self.legacy_filename or self.store.exists(self.filename):
            return False
        if not self.store.exists(self.legacy_filename):
            return False

        try:
            records = _parse_records(self.store.read(self.legacy_filename), self.legacy_filename)
        except InventoryError as e:
            logger.warning("legacy_migration_skipped %s", json.dumps({"error": str(e)}, ensure_ascii=False))
            return False

        self.save(records)
        self.store.remove(self.legacy_filename)
        logger.info(
            "legacy_migration_done %s",
            json.dumps({"from": self.legacy_filename, "to": self.filename, "records": len(records)}),
        )
        return True
