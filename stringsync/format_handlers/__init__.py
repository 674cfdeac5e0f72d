#!/usr/bin/env python3
"""
Format handlers for on-disk string tables.

Supported formats:
- iOS Strings: Apple Localizable.strings files
"""

from .base import FormatHandler, TranslationEntry
from .ios_strings import IosStringsHandler

__all__ = [
    'FormatHandler',
    'TranslationEntry',
    'IosStringsHandler',
]
