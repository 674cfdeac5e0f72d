#!/usr/bin/env python3
"""
Tests for the change-set between two key-major snapshots.
"""

from stringsync.diff import ChangeSet, diff


def test_added_and_removed_keys():
    old = {"k1": {"en": "v1"}, "k2": {"en": "v2"}}
    new = {"k1": {"en": "v1"}, "k3": {"en": "v3"}}

    changes = diff(old, new)

    assert changes.added == {"k3": {"en": "v3"}}
    assert changes.removed == {"k2": {"en": "v2"}}
    assert changes.changed == {}


def test_single_locale_change_marks_key_changed():
    old = {"k1": {"en": "v1", "fr": "f1"}}
    new = {"k1": {"en": "v1", "fr": "f2"}}

    changes = diff(old, new)

    assert changes.changed == {"k1": {"en": "v1", "fr": "f2"}}
    assert changes.added == {}
    assert changes.removed == {}


def test_locale_added_or_dropped_marks_key_changed():
    old = {"k1": {"en": "v1"}, "k2": {"en": "v2", "de": "d2"}}
    new = {"k1": {"en": "v1", "ja": "j1"}, "k2": {"en": "v2"}}

    changes = diff(old, new)

    assert changes.changed == {"k1": {"en": "v1", "ja": "j1"}, "k2": {"en": "v2"}}


def test_identical_snapshots_produce_empty_changeset():
    snapshot = {"k1": {"en": "v1", "fr": "f1"}}

    changes = diff(snapshot, {"k1": {"en": "v1", "fr": "f1"}})

    assert changes.is_empty
    assert changes == ChangeSet()


def test_partition_law():
    """added/removed/changed are disjoint and cover every differing key."""
    old = {
        "same": {"en": "s"},
        "gone": {"en": "g"},
        "edit": {"en": "e", "fr": "fe"},
        "edit2": {"en": "x"},
    }
    new = {
        "same": {"en": "s"},
        "edit": {"en": "e", "fr": "FE"},
        "edit2": {"en": "y"},
        "fresh": {"en": "f"},
    }

    changes = diff(old, new)
    added, removed, changed = set(changes.added), set(changes.removed), set(changes.changed)

    assert not (added & removed) and not (added & changed) and not (removed & changed)
    differing = (set(old) ^ set(new)) | {k for k in set(old) & set(new) if old[k] != new[k]}
    assert added | removed | changed == differing
    assert "same" not in added | removed | changed


def test_diff_is_deterministic_and_pure():
    old = {"k1": {"en": "v1"}, "k2": {"en": "v2"}}
    new = {"k1": {"en": "changed"}, "k3": {"en": "v3"}}

    first = diff(old, new)
    second = diff(old, new)

    assert first == second
    assert old == {"k1": {"en": "v1"}, "k2": {"en": "v2"}}
    assert new == {"k1": {"en": "changed"}, "k3": {"en": "v3"}}


def test_updates_merges_added_and_changed():
    changes = ChangeSet(
        added={"a": {"en": "A"}},
        removed={"r": {"en": "R"}},
        changed={"c": {"en": "C"}},
    )

    assert changes.updates == {"a": {"en": "A"}, "c": {"en": "C"}}


def test_summary_reports_sorted_keys_and_counts():
    changes = diff(
        {"b": {"en": "1"}, "z": {"en": "z"}},
        {"b": {"en": "2"}, "c": {"en": "c"}, "a": {"en": "a"}},
    )

    assert changes.summary() == {
        "added": ["a", "c"],
        "removed": ["z"],
        "changed": ["b"],
        "counts": {"added": 2, "removed": 1, "changed": 1},
    }
