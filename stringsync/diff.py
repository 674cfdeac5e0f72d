#!/usr/bin/env python3
"""
Change-set computation between two key-major snapshots.
"""

from dataclasses import dataclass, field
from typing import Any

from .transform import KeyTable


@dataclass(frozen=True)
class ChangeSet:
    """
    Keys that differ between an old and a new snapshot.

    Attributes:
        added: Keys only in the new snapshot, with their new strings
        removed: Keys only in the old snapshot, with their old strings
        changed: Keys in both whose strings differ in any locale, with the new strings
    """
    added: KeyTable = field(default_factory=dict)
    removed: KeyTable = field(default_factory=dict)
    changed: KeyTable = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)

    @property
    def updates(self) -> KeyTable:
        """Added and changed strings together: everything an upload writes."""
        return {**self.added, **self.changed}

    def summary(self) -> dict[str, Any]:
        """Counts and sorted key lists, for reporting."""
        return {
            "added": sorted(self.added),
            "removed": sorted(self.removed),
            "changed": sorted(self.changed),
            "counts": {
                "added": len(self.added),
                "removed": len(self.removed),
                "changed": len(self.changed),
            },
        }


def diff(old: KeyTable, new: KeyTable) -> ChangeSet:
    """
    Compare two key-major snapshots.

    A key counts as changed when its locale -> value mapping differs at all:
    a different value in one locale, or a locale present on one side only.
    Unchanged keys appear in none of the three sets.
    """
    added = {key: dict(strings) for key, strings in new.items() if key not in old}
    removed = {key: dict(strings) for key, strings in old.items() if key not in new}
    changed = {
        key: dict(strings)
        for key, strings in new.items()
        if key in old and old[key] != strings
    }
    return ChangeSet(added=added, removed=removed, changed=changed)
