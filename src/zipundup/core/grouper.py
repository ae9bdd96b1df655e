"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Accumulators filled by the comparison pass.

ArchiveGroups     : duplicate groups as a disjoint-set forest keyed by case-insensitive path,
                    so pairs found in any order (a~b, c~d, then b~c) end up in one group
ArchiveInclusions : (container, contained) relations, kept in discovery order
"""

from typing import Dict, Iterator, List, Tuple

from zipundup.core.models import ArchiveSummary


class ArchiveGroups:
    """Groups of mutually duplicate archives; each archive belongs to at most one group."""

    def __init__(self):
        self._parent: Dict[str, str] = {}
        self._summaries: Dict[str, ArchiveSummary] = {}  # insertion ordered
        self._order: Dict[str, int] = {}

    def add(self, summary1: ArchiveSummary, summary2: ArchiveSummary) -> None:
        """Records that two archives are duplicates, merging their groups if needed."""
        key1 = self._insert(summary1)
        key2 = self._insert(summary2)
        root1 = self._find(key1)
        root2 = self._find(key2)
        if root1 == root2:
            return
        # The older group's root survives so group order follows first insertion
        if self._order[root1] <= self._order[root2]:
            self._parent[root2] = root1
        else:
            self._parent[root1] = root2

    def contains(self, summary: ArchiveSummary) -> bool:
        return summary.path_key in self._parent

    def in_same_group(self, summary1: ArchiveSummary, summary2: ArchiveSummary) -> bool:
        if not (self.contains(summary1) and self.contains(summary2)):
            return False
        return self._find(summary1.path_key) == self._find(summary2.path_key)

    def groups(self) -> List[List[ArchiveSummary]]:
        """Groups in order of first insertion; members in insertion order."""
        grouped: Dict[str, List[ArchiveSummary]] = {}
        for key, summary in self._summaries.items():
            grouped.setdefault(self._find(key), []).append(summary)
        return list(grouped.values())

    @property
    def count(self) -> int:
        """Number of archives in all groups."""
        return len(self._summaries)

    def __len__(self) -> int:
        return len(self.groups())

    def _insert(self, summary: ArchiveSummary) -> str:
        key = summary.path_key
        if key not in self._parent:
            self._parent[key] = key
            self._summaries[key] = summary
            self._order[key] = len(self._order)
        return key

    def _find(self, key: str) -> str:
        root = key
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[key] != root:
            self._parent[key], key = root, self._parent[key]
        return root


class ArchiveInclusions:
    """(container, contained) relations; no merging, no deduplication."""

    def __init__(self):
        self._inclusions: List[Tuple[ArchiveSummary, ArchiveSummary]] = []

    def add(self, container: ArchiveSummary, contained: ArchiveSummary) -> None:
        self._inclusions.append((container, contained))

    def __iter__(self) -> Iterator[Tuple[ArchiveSummary, ArchiveSummary]]:
        return iter(self._inclusions)

    def __len__(self) -> int:
        return len(self._inclusions)
