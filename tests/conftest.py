"""Shared fixtures for strings-sync tests."""

from pathlib import Path

import pytest


def write_strings(root: Path, locale: str, content: str) -> Path:
    """Write <root>/<locale>.lproj/Localizable.strings."""
    directory = root / f"{locale}.lproj"
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "Localizable.strings"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def make_bundle(tmp_path):
    """Build a bundle directory from {locale: {key: value}}."""
    def _make(name: str, strings_by_locale: dict) -> Path:
        root = tmp_path / name
        root.mkdir()
        for locale, strings in strings_by_locale.items():
            lines = [
                '"{}" = "{}";'.format(key.replace('"', '\\"'), value.replace('"', '\\"'))
                for key, value in strings.items()
            ]
            write_strings(root, locale, "\n".join(lines) + "\n")
        return root
    return _make
