#!/usr/bin/env python3
"""
Tests for reading and writing .lproj bundles.
"""

import pytest

from conftest import write_strings
from stringsync.bundle import read_bundle, read_raw_bundle, read_strings_file, write_bundle
from stringsync.errors import EnglishResourceMissing, FilesystemFailure, InvalidFormat


def test_read_bundle_prunes_orphans(make_bundle):
    root = make_bundle("bundle", {
        "en": {"a": "A", "b": "B"},
        "fr": {"a": "FA", "c": "FC"},
        "de": {"c": "DC"},
    })

    assert read_bundle(root) == {"en": {"a": "A", "b": "B"}, "fr": {"a": "FA"}}


def test_read_raw_bundle_keeps_orphans(make_bundle):
    root = make_bundle("bundle", {"en": {"a": "A"}, "fr": {"c": "FC"}})

    assert read_raw_bundle(root) == {"en": {"a": "A"}, "fr": {"c": "FC"}}


def test_read_bundle_ignores_other_entries(make_bundle):
    root = make_bundle("bundle", {"en": {"a": "A"}})
    (root / "Assets").mkdir()
    (root / "notes.txt").write_text("ignored", encoding="utf-8")
    (root / "fake.lproj").write_text("a file, not a directory", encoding="utf-8")

    assert read_bundle(root) == {"en": {"a": "A"}}


def test_read_bundle_requires_english(make_bundle):
    root = make_bundle("bundle", {"fr": {"a": "FA"}})

    with pytest.raises(EnglishResourceMissing):
        read_bundle(root)


def test_read_bundle_missing_directory(tmp_path):
    with pytest.raises(FilesystemFailure):
        read_bundle(tmp_path / "missing")


def test_lproj_without_strings_file_is_malformed(make_bundle):
    root = make_bundle("bundle", {"en": {"a": "A"}})
    (root / "fr.lproj").mkdir()

    with pytest.raises(InvalidFormat):
        read_bundle(root)


def test_malformed_strings_file(tmp_path):
    path = write_strings(tmp_path, "en", '"a" = "A"\n')

    with pytest.raises(InvalidFormat) as excinfo:
        read_strings_file(path)

    assert str(path) in str(excinfo.value)


def test_read_utf16_strings_file(tmp_path):
    directory = tmp_path / "en.lproj"
    directory.mkdir()
    path = directory / "Localizable.strings"
    path.write_bytes('"café" = "Café";'.encode("utf-16"))

    assert read_strings_file(path) == {"café": "Café"}


def test_read_invalid_utf8(tmp_path):
    directory = tmp_path / "en.lproj"
    directory.mkdir()
    path = directory / "Localizable.strings"
    path.write_bytes(b'"a" = "\xff\xfe\xfd";')

    with pytest.raises(InvalidFormat):
        read_strings_file(path)


def test_write_bundle_layout(tmp_path):
    root = tmp_path / "out"

    written = write_bundle({
        "en": {"b": "Bee", "a": "Ay"},
        "fr": {"a": "A-fr"},
    }, root)

    assert sorted(p.relative_to(root).as_posix() for p in written) == [
        "en.lproj/Localizable.strings",
        "fr.lproj/Localizable.strings",
    ]
    assert (root / "en.lproj" / "Localizable.strings").read_text(encoding="utf-8") == (
        '// English: Ay\n"a" = "Ay";\n\n// English: Bee\n"b" = "Bee";\n'
    )
    assert (root / "fr.lproj" / "Localizable.strings").read_text(encoding="utf-8") == (
        '// English: Ay\n"a" = "A-fr";\n'
    )


def test_write_then_read_reproduces_table(tmp_path):
    strings_by_locale = {
        "en": {"quote": 'Say "hi"', "multi": "one\ntwo", "slash": "a\\b"},
        "ja": {"quote": "「やあ」"},
    }

    write_bundle(strings_by_locale, tmp_path / "out")

    assert read_bundle(tmp_path / "out") == strings_by_locale


def test_write_replaces_existing_file(tmp_path):
    root = tmp_path / "out"
    write_bundle({"en": {"a": "old"}}, root)
    write_bundle({"en": {"a": "new"}}, root)

    assert read_bundle(root) == {"en": {"a": "new"}}
    assert [p.name for p in (root / "en.lproj").iterdir()] == ["Localizable.strings"]


def test_write_requires_english(tmp_path):
    with pytest.raises(EnglishResourceMissing):
        write_bundle({"fr": {"a": "FA"}}, tmp_path / "out")


def test_write_rejects_key_without_english(tmp_path):
    """Unlike reading, writing refuses keys English does not define."""
    root = tmp_path / "out"

    with pytest.raises(EnglishResourceMissing):
        write_bundle({"en": {"a": "A"}, "fr": {"a": "FA", "b": "FB"}}, root)

    assert not root.exists()


def test_write_into_a_file_fails(tmp_path):
    target = tmp_path / "file"
    target.write_text("not a directory", encoding="utf-8")

    with pytest.raises(FilesystemFailure):
        write_bundle({"en": {"a": "A"}}, target)
