from .classifier import ChangeClassifier
from .engine import SyncEngine
from .events import EventKind, NotificationEvent
from .file_store import FileStore, LocalFileStore, NamingPolicy
from .inventory import InventoryStore
from .models import Category, Changelog, LocalRecord, ReconciledItem, RemoteItem, RunResult
from .resolver import ConflictResolver

__all__ = [
    "Category",
    "ChangeClassifier",
    "Changelog",
    "ConflictResolver",
    "EventKind",
    "FileStore",
    "InventoryStore",
    "LocalFileStore",
    "LocalRecord",
    "NamingPolicy",
    "NotificationEvent",
    "ReconciledItem",
    "RemoteItem",
    "RunResult",
    "SyncEngine",
]
