"""
Pure derivations over the cached file list: tab views, storage stats and
size formatting. Nothing here is cached; callers recompute on every read.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

from cloudbox_client.models import RemoteFile

DEFAULT_STORAGE_LIMIT = 100 * 1024 * 1024

CATEGORIES = ("Images", "Videos", "Documents", "Audio", "Others")

CATEGORY_EXTENSIONS = {
    "Images": {"jpg", "jpeg", "png", "gif", "webp", "svg"},
    "Videos": {"mp4", "mov", "avi", "mkv", "webm"},
    "Documents": {"pdf", "doc", "docx", "txt", "xls", "xlsx", "ppt", "pptx"},
    "Audio": {"mp3", "wav", "ogg"},
}

_SIZE_UNITS = ("B", "KB", "MB", "GB")


class Tab(str, Enum):
    ALL = "all"
    RECENT = "recent"
    FAVORITES = "favorites"
    TRASH = "trash"


def categorize(filename: str) -> str:
    extension = filename.rsplit(".", 1)[-1].lower()
    for category, extensions in CATEGORY_EXTENSIONS.items():
        if extension in extensions:
            return category
    return "Others"


def derive_view(files: Iterable[RemoteFile], tab: Tab = Tab.ALL, search: Optional[str] = None) -> List[RemoteFile]:
    """
    Files visible under a tab.

    The trash tab shows exactly the trashed files and ignores the search
    term. Every other tab hides trashed files, then filters by a
    case-insensitive substring of the key. `recent` sorts newest first;
    `favorites` keeps favorites only.
    """
    tab = Tab(tab)
    files = list(files)
    if tab == Tab.TRASH:
        return [f for f in files if f.is_trash]

    result = [f for f in files if not f.is_trash]
    if search:
        needle = search.lower()
        result = [f for f in result if needle in f.key.lower()]

    if tab == Tab.RECENT:
        result = sorted(result, key=lambda f: f.last_modified, reverse=True)
    elif tab == Tab.FAVORITES:
        result = [f for f in result if f.is_favorite]
    return result


@dataclass
class StorageStats:
    by_category: Dict[str, int] = field(default_factory=lambda: {c: 0 for c in CATEGORIES})
    total: int = 0
    limit: int = DEFAULT_STORAGE_LIMIT

    @property
    def used_fraction(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.total / self.limit


def derive_stats(files: Iterable[RemoteFile], limit: int = DEFAULT_STORAGE_LIMIT) -> StorageStats:
    """Byte totals per category over every file, trashed ones included."""
    stats = StorageStats(limit=limit)
    for f in files:
        size = f.size or 0
        stats.by_category[categorize(f.key)] += size
        stats.total += size
    return stats


def human_size(num_bytes: Optional[int]) -> str:
    if not num_bytes:
        return "0 B"
    value = float(num_bytes)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_SIZE_UNITS[unit]}"
