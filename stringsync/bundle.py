#!/usr/bin/env python3
"""
Reading and writing .lproj resource bundles.

Bundle layout:
    <root>/
        en.lproj/Localizable.strings
        fr.lproj/Localizable.strings
        ...

Reading prunes translations whose key English does not define. Writing
refuses such keys instead: a key without English at write time means the
tables were assembled incorrectly upstream.
"""

import codecs
import logging
import os
import tempfile
from pathlib import Path

from .errors import EnglishResourceMissing, FilesystemFailure, InvalidFormat
from .format_handlers import IosStringsHandler, TranslationEntry
from .transform import StringTable, english_strings, prune_orphans

logger = logging.getLogger(__name__)

LPROJ_SUFFIX = ".lproj"
STRINGS_FILENAME = "Localizable.strings"


def _decode(data: bytes, path: Path) -> str:
    """Decode .strings bytes: UTF-16 when a BOM says so, UTF-8 otherwise."""
    try:
        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            return data.decode("utf-16")
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise InvalidFormat(f"{path}: {e}") from e


def read_strings_file(path: Path) -> dict[str, str]:
    """
    Read one Localizable.strings file.

    Args:
        path: Path to the .strings file

    Returns:
        Key -> value mapping

    Raises:
        InvalidFormat: If the file is missing, undecodable or malformed
        FilesystemFailure: If the file exists but cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidFormat(f"{path} does not exist")

    try:
        data = path.read_bytes()
    except OSError as e:
        raise FilesystemFailure(f"cannot read {path}: {e}") from e

    try:
        return IosStringsHandler().to_dict(_decode(data, path))
    except InvalidFormat as e:
        raise InvalidFormat(f"{path}: {e.detail}") from e


def read_raw_bundle(root: Path) -> StringTable:
    """
    Read every <locale>.lproj/Localizable.strings under root, unpruned.

    Entries that are not .lproj directories are ignored.
    """
    root = Path(root)
    try:
        children = sorted(root.iterdir())
    except OSError as e:
        raise FilesystemFailure(f"cannot list {root}: {e}") from e

    strings_by_locale = {}
    for child in children:
        if not child.name.endswith(LPROJ_SUFFIX) or not child.is_dir():
            continue
        locale = child.name[:-len(LPROJ_SUFFIX)]
        strings_by_locale[locale] = read_strings_file(child / STRINGS_FILENAME)
        logger.debug("Read %d strings for %s", len(strings_by_locale[locale]), locale)

    return strings_by_locale


def read_bundle(root: Path) -> StringTable:
    """Read a bundle and drop keys that English does not define."""
    strings_by_locale = prune_orphans(read_raw_bundle(root))
    logger.info("Parsed %d locale(s) from %s", len(strings_by_locale), root)
    return strings_by_locale


def _write_atomically(path: Path, content: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def write_bundle(strings_by_locale: StringTable, root: Path) -> list[Path]:
    """
    Write one Localizable.strings per locale under root.

    Keys are written in lexicographic order, each preceded by a comment with
    its English value. Existing files are replaced.

    Args:
        strings_by_locale: Locale-major table including English
        root: Bundle directory (created if missing)

    Returns:
        Paths of the written files

    Raises:
        EnglishResourceMissing: If English is absent or any key lacks an English value
        FilesystemFailure: If a directory or file cannot be written
    """
    root = Path(root)
    english = english_strings(strings_by_locale)
    handler = IosStringsHandler()

    entries_by_locale = {}
    for locale in sorted(strings_by_locale):
        strings = strings_by_locale[locale]
        entries = []
        for key in sorted(strings):
            if key not in english:
                raise EnglishResourceMissing(f"key '{key}' in locale '{locale}' has no English value")
            entries.append(TranslationEntry(
                id=key,
                text=strings[key],
                context=f"English: {english[key]}",
            ))
        entries_by_locale[locale] = entries

    written = []
    for locale, entries in entries_by_locale.items():
        directory = root / f"{locale}{LPROJ_SUFFIX}"
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemFailure(f"cannot create {directory}: {e}") from e

        path = directory / STRINGS_FILENAME
        try:
            _write_atomically(path, handler.reconstruct(entries))
        except OSError as e:
            raise FilesystemFailure(f"cannot write {path}: {e}") from e

        logger.debug("Wrote %d strings to %s", len(entries), path)
        written.append(path)

    logger.info("Wrote %d locale(s) to %s", len(written), root)
    return written
