#!/usr/bin/env python3
"""
Mapping between CloudKit records and key-major string tables.

Each record's name is a translation key. The record's main field holds a
JSON object of locale -> value. English lives either in that object or, when
an English field is configured, in its own field.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .diff import ChangeSet
from .errors import EnglishResourceMissing, InternalError, InvalidFormat, RemovalNotAllowed
from .transform import ENGLISH, KeyTable

logger = logging.getLogger(__name__)


def _field_value(record: dict[str, Any], key: str) -> Any:
    field = record.get("fields", {}).get(key)
    if field is None:
        return None
    return field.get("value")


def _decode_locales(record_name: str, blob: Any) -> dict[str, str]:
    """Decode a main-field JSON blob into locale -> value."""
    if not isinstance(blob, str):
        raise InvalidFormat(f"record '{record_name}': main field is not a string")
    try:
        strings = json.loads(blob)
    except ValueError as e:
        raise InvalidFormat(f"record '{record_name}': {e}") from e

    if not isinstance(strings, dict) or not all(isinstance(v, str) for v in strings.values()):
        raise InvalidFormat(f"record '{record_name}': main field is not a JSON object of strings")
    return strings


@dataclass(frozen=True)
class FieldMapping:
    """
    Which record fields hold the strings.

    Attributes:
        main_key: Field with the JSON encoded locale -> value object
        english_key: Optional field holding the English value on its own
    """
    main_key: str
    english_key: Optional[str] = None

    @property
    def desired_keys(self) -> list[str]:
        return [key for key in (self.main_key, self.english_key) if key]

    def decode(self, record: dict[str, Any]) -> dict[str, str]:
        """
        Read the locale -> value mapping of a record.

        Raises:
            EnglishResourceMissing: If no English value can be recovered
            InvalidFormat: If the main field is not a JSON object of strings
        """
        name = record.get("recordName", "?")
        blob = _field_value(record, self.main_key)

        if self.english_key:
            english = _field_value(record, self.english_key)
            if not isinstance(english, str):
                raise EnglishResourceMissing(f"record '{name}' has no '{self.english_key}' field")
            strings = {ENGLISH: english}
            if blob is not None:
                strings.update(_decode_locales(name, blob))
            return strings

        if blob is None:
            raise EnglishResourceMissing(f"record '{name}' has no '{self.main_key}' field")
        strings = _decode_locales(name, blob)
        if ENGLISH not in strings:
            raise EnglishResourceMissing(f"record '{name}' has no '{ENGLISH}' value")
        return strings

    def encode(self, strings: dict[str, str]) -> dict[str, dict[str, str]]:
        """Build the record fields for a locale -> value mapping."""
        fields = {}
        to_save = dict(strings)
        if self.english_key:
            if ENGLISH not in to_save:
                raise EnglishResourceMissing("cannot save strings without an English value")
            fields[self.english_key] = {"value": to_save.pop(ENGLISH)}
        fields[self.main_key] = {
            "value": json.dumps(to_save, ensure_ascii=False, sort_keys=True, separators=(",", ":")),
        }
        return fields


class RemoteStringStore:
    """
    Reads and writes key-major string tables through a CloudKit client.

    The client needs ``query_all``, ``lookup_records`` and ``modify_records``
    (see CloudKitClient).
    """

    def __init__(self, client, mapping: FieldMapping):
        self.client = client
        self.mapping = mapping

    def fetch_strings(self, record_type: str) -> KeyTable:
        """Fetch every record of a type as a key-major table."""
        records = self.client.query_all(record_type, self.mapping.desired_keys)

        logger.info("Parsing record results...")
        return {record["recordName"]: self.mapping.decode(record) for record in records}

    def upload_changes(self, changes: ChangeSet) -> int:
        """
        Write added and changed strings onto their existing records.

        Records are expected to exist already: a key the server does not
        return is an error. Nothing is saved unless every record was found.

        Returns:
            Number of records saved

        Raises:
            RemovalNotAllowed: If the change-set removes any key
            InternalError: If a record for an updated key is missing
        """
        if changes.removed:
            raise RemovalNotAllowed(list(changes.removed))

        updates = changes.updates
        if not updates:
            logger.info("No changes to upload")
            return 0

        logger.info("Fetch original records...")
        records = {
            record["recordName"]: record
            for record in self.client.lookup_records(sorted(updates), self.mapping.desired_keys)
        }

        logger.info("Merging record changes...")
        to_save = []
        for key in sorted(updates):
            record = records.get(key)
            if record is None:
                raise InternalError(f"record missing for '{key}'")
            merged = {
                "recordName": key,
                "recordType": record.get("recordType"),
                "fields": self.mapping.encode(updates[key]),
            }
            to_save.append(merged)

        logger.info("Uploading record changes...")
        saved = self.client.modify_records(to_save)
        logger.info("Saved %d record(s)", len(saved))
        return len(saved)
