"""Tree sources that contribute row ranges to the explorer surface."""

from .file_source import FileSource, SyncHandle

__all__ = ["FileSource", "SyncHandle"]
