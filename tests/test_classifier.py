from pathlib import Path

from iconsync.sync import Category, ChangeClassifier, LocalFileStore, LocalRecord, NamingPolicy, RemoteItem


def _classifier(tmp_path: Path) -> ChangeClassifier:
    return ChangeClassifier(LocalFileStore(str(tmp_path)), NamingPolicy())


def _record(identifier: str, name: str, content_hash: str, previous_names: list[str] | None = None) -> LocalRecord:
    return LocalRecord(identifier=identifier, name=name, content_hash=content_hash, previous_names=previous_names or [])


def _names(items) -> list[str]:
    return [item.name for item in items]


def test_first_run_marks_everything_added(tmp_path: Path):
    remote = [RemoteItem("1:1", "a", "h1"), RemoteItem("1:2", "b", "h2")]

    changelog = _classifier(tmp_path).classify(remote, None)

    assert _names(changelog.added) == ["a", "b"]
    assert changelog.modified == changelog.restored == changelog.unmodified == changelog.removed == []


def test_force_all_ignores_existing_inventory(tmp_path: Path):
    (tmp_path / "a.svg").write_bytes(b"<svg/>")
    remote = [RemoteItem("1:1", "a", "h1")]

    changelog = _classifier(tmp_path).classify(remote, [_record("1:1", "a", "h1")], force_all=True)

    assert _names(changelog.added) == ["a"]
    assert changelog.unmodified == []


def test_hash_and_file_presence_pick_the_category(tmp_path: Path):
    (tmp_path / "same.svg").write_bytes(b"<svg/>")
    (tmp_path / "changed.svg").write_bytes(b"<svg/>")
    remote = [
        RemoteItem("1", "same", "h1"),
        RemoteItem("2", "changed", "new"),
        RemoteItem("3", "deleted-same", "h3"),
        RemoteItem("4", "deleted-changed", "new"),
    ]
    local = [
        _record("1", "same", "h1"),
        _record("2", "changed", "old"),
        _record("3", "deleted-same", "h3"),
        _record("4", "deleted-changed", "old"),
    ]

    changelog = _classifier(tmp_path).classify(remote, local)

    assert _names(changelog.unmodified) == ["same"]
    assert _names(changelog.modified) == ["changed"]
    assert _names(changelog.restored) == ["deleted-same", "deleted-changed"]
    assert changelog.added == []


def test_rename_is_detected_against_the_old_file(tmp_path: Path):
    (tmp_path / "old.svg").write_bytes(b"<svg/>")

    changelog = _classifier(tmp_path).classify([RemoteItem("1", "new", "h1")], [_record("1", "old", "h1")])

    [item] = changelog.unmodified
    assert item.is_renamed is True
    assert item.name == "new"
    assert item.previous_names == ["old"]


def test_rename_does_not_duplicate_history(tmp_path: Path):
    changelog = _classifier(tmp_path).classify(
        [RemoteItem("1", "c", "h1")],
        [_record("1", "b", "h1", previous_names=["a"])],
    )

    [item] = changelog.restored
    assert item.previous_names == ["a", "b"]


def test_removed_only_when_file_still_on_disk(tmp_path: Path):
    (tmp_path / "kept.svg").write_bytes(b"<svg/>")
    local = [_record("1", "kept", "h1"), _record("2", "gone", "h2")]

    changelog = _classifier(tmp_path).classify([], local)

    assert _names(changelog.removed) == ["kept"]
    assert changelog.to_reuse()[0].identifier == "1"


def test_duplicate_remote_identifier_keeps_first(tmp_path: Path):
    remote = [RemoteItem("1", "first", "h1"), RemoteItem("1", "second", "h2")]

    changelog = _classifier(tmp_path).classify(remote, [])

    assert _names(changelog.added) == ["first"]


def test_subfolder_names_map_to_nested_paths(tmp_path: Path):
    (tmp_path / "socials").mkdir()
    (tmp_path / "socials" / "facebook.svg").write_bytes(b"<svg/>")
    classifier = ChangeClassifier(LocalFileStore(str(tmp_path)), NamingPolicy())

    changelog = classifier.classify([RemoteItem("1", "socials/facebook", "h1")], [_record("1", "socials/facebook", "h1")])

    assert changelog.bucket(Category.UNMODIFIED)[0].name == "socials/facebook"


def test_flattened_names_when_subfolders_ignored(tmp_path: Path):
    (tmp_path / "socials_facebook.svg").write_bytes(b"<svg/>")
    classifier = ChangeClassifier(LocalFileStore(str(tmp_path)), NamingPolicy(ignore_subfolders=True))

    changelog = classifier.classify([RemoteItem("1", "socials/facebook", "h1")], [_record("1", "socials/facebook", "h1")])

    assert _names(changelog.unmodified) == ["socials/facebook"]


class _MemoryStore:
    def __init__(self, files: dict[str, bytes] | None = None):
        self.files = dict(files or {})

    def exists(self, path: str) -> bool:
        return path in self.files

    def read(self, path: str) -> bytes:
        return self.files[path]

    def write(self, path: str, content: bytes) -> None:
        self.files[path] = content

    def ensure_dir(self, path: str) -> None:
        pass

    def remove(self, path: str) -> None:
        self.files.pop(path, None)


def test_categories_do_not_depend_on_input_order():
    store = _MemoryStore({"a.svg": b"", "b.svg": b"", "gone-remote.svg": b""})
    classifier = ChangeClassifier(store, NamingPolicy())
    remote = [RemoteItem("1", "a", "h1"), RemoteItem("2", "b", "new"), RemoteItem("3", "c", "h3"), RemoteItem("5", "e", "h5")]
    local = [
        _record("1", "a", "h1"),
        _record("2", "b", "old"),
        _record("3", "c", "h3"),
        _record("4", "gone-remote", "h4"),
    ]

    def categories(changelog) -> dict[str, str]:
        return {item.identifier: category.value for category in Category for item in changelog.bucket(category)}

    forward = categories(classifier.classify(remote, local))
    backward = categories(classifier.classify(list(reversed(remote)), list(reversed(local))))

    assert forward == backward == {"1": "unmodified", "2": "modified", "3": "restored", "4": "removed", "5": "added"}
