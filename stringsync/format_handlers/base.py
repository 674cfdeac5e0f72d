#!/usr/bin/env python3
"""
Base classes for format handlers.

FormatHandler is the abstract base class for the on-disk string table
formats. TranslationEntry is the format-independent record a handler parses
into and reconstructs from.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class TranslationEntry:
    """
    One key/value pair of a string table.

    Attributes:
        id: Translation key
        text: Value for the file's locale
        context: Optional comment shown above the entry
        metadata: Format-specific data (raw comments, source line)
    """
    id: str
    text: str
    context: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Ensure id is string."""
        self.id = str(self.id)


class FormatHandler(ABC):
    """
    Abstract base class for format-specific handlers.

    A handler converts between file content and TranslationEntry lists. It
    does no file I/O itself.
    """

    @abstractmethod
    def parse(self, content: str) -> list[TranslationEntry]:
        """
        Parse format-specific content into translation entries.

        Args:
            content: Raw file content as string

        Returns:
            List of TranslationEntry objects

        Raises:
            InvalidFormat: If the content is malformed
        """
        pass

    @abstractmethod
    def reconstruct(self, entries: list[TranslationEntry]) -> str:
        """
        Render entries as format-specific file content.

        Args:
            entries: Entries to write, in output order

        Returns:
            File content as string
        """
        pass

    def to_dict(self, content: str) -> dict[str, str]:
        """Parse content into a plain key -> value mapping. Later keys win."""
        return {entry.id: entry.text for entry in self.parse(content)}
