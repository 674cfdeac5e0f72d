#!/usr/bin/env python3
"""
Conversions between the two shapes of a multi-locale string table.

Locale-major (StringTable):  {"en": {"greeting": "Hello"}, "fr": {"greeting": "Bonjour"}}
Key-major (KeyTable):        {"greeting": {"en": "Hello", "fr": "Bonjour"}}

English is the canonical locale: its keys define which keys exist at all.
Every function returns freshly built dicts and leaves its input untouched.
"""

from .errors import EnglishResourceMissing

ENGLISH = "en"

StringTable = dict[str, dict[str, str]]
KeyTable = dict[str, dict[str, str]]


def english_strings(strings_by_locale: StringTable) -> dict[str, str]:
    """Return the English table or raise EnglishResourceMissing."""
    english = strings_by_locale.get(ENGLISH)
    if english is None:
        raise EnglishResourceMissing(f"no '{ENGLISH}' locale")
    return english


def prune_orphans(raw_by_locale: StringTable) -> StringTable:
    """
    Drop keys that English does not define.

    Locales left with no strings after pruning are dropped entirely,
    English included.

    Args:
        raw_by_locale: Locale -> key -> value, as read from storage

    Returns:
        StringTable containing only keys present in English
    """
    english = english_strings(raw_by_locale)

    pruned = {}
    for locale, strings in raw_by_locale.items():
        kept = {key: value for key, value in strings.items() if key in english}
        if kept:
            pruned[locale] = kept
    return pruned


def to_key_major(strings_by_locale: StringTable) -> KeyTable:
    """
    Convert a locale-major table into a key-major one.

    Only English keys are represented; a translation for a key English does
    not define is ignored.
    """
    english = english_strings(strings_by_locale)

    strings_by_key = {}
    for key, value in english.items():
        entry = {ENGLISH: value}
        for locale, strings in strings_by_locale.items():
            if locale != ENGLISH and key in strings:
                entry[locale] = strings[key]
        strings_by_key[key] = entry
    return strings_by_key


def to_locale_major(strings_by_key: KeyTable) -> StringTable:
    """
    Convert a key-major table into a locale-major one.

    Raises EnglishResourceMissing at the first key without an English value;
    no partial table is returned.
    """
    strings_by_locale: StringTable = {}
    for key, strings in strings_by_key.items():
        if ENGLISH not in strings:
            raise EnglishResourceMissing(f"key '{key}' has no '{ENGLISH}' value")
        for locale, value in strings.items():
            strings_by_locale.setdefault(locale, {})[key] = value
    return strings_by_locale
