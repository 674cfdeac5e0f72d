#!/usr/bin/env python3
"""
Minimal client for the CloudKit Web Services records API.

Only the three record operations strings-sync needs are implemented:
query (with continuation markers), lookup by record name, and modify.
Requests are authenticated with either an API token or a server-to-server
key pair.
"""

import base64
import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import requests
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .errors import ConfigurationError, RemoteStoreFailure

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.apple-cloudkit.com"
API_VERSION = "1"

# CloudKit rejects lookup/modify requests with more records than this.
MAX_RECORDS_PER_REQUEST = 200


class ApiTokenAuth:
    """Authenticates requests with a container API token."""

    def __init__(self, token: str):
        self.token = token

    def sign(self, subpath: str, body: bytes) -> tuple[dict[str, str], dict[str, str]]:
        """Return (headers, query params) for a request."""
        return {}, {"ckAPIToken": self.token}


class ServerKeyAuth:
    """
    Authenticates requests with a server-to-server key.

    Each request is signed with ECDSA P-256/SHA-256 over
    ``<ISO8601 date>:<base64 sha256(body)>:<subpath>``.
    """

    def __init__(self, key_id: str, private_key: ec.EllipticCurvePrivateKey):
        self.key_id = key_id
        self.private_key = private_key

    @classmethod
    def from_file(cls, key_id: str, key_file_path: str) -> "ServerKeyAuth":
        """Load a PEM encoded EC private key."""
        try:
            pem = Path(key_file_path).read_bytes()
        except OSError as e:
            raise ConfigurationError(f"cannot read key file {key_file_path}: {e}") from e

        try:
            private_key = serialization.load_pem_private_key(pem, password=None)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"invalid key file {key_file_path}: {e}") from e

        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise ConfigurationError(f"key file {key_file_path} does not hold an EC private key")
        return cls(key_id, private_key)

    def sign(
        self,
        subpath: str,
        body: bytes,
        now: Optional[datetime] = None,
    ) -> tuple[dict[str, str], dict[str, str]]:
        """Return (headers, query params) for a request."""
        date = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H:%M:%SZ")
        body_hash = base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")
        message = f"{date}:{body_hash}:{subpath}".encode("utf-8")
        signature = self.private_key.sign(message, ec.ECDSA(hashes.SHA256()))

        headers = {
            "X-Apple-CloudKit-Request-KeyID": self.key_id,
            "X-Apple-CloudKit-Request-ISO8601Date": date,
            "X-Apple-CloudKit-Request-SignatureV1": base64.b64encode(signature).decode("ascii"),
        }
        return headers, {}


def _chunks(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class CloudKitClient:
    """Thin wrapper around the CloudKit Web Services records endpoints."""

    def __init__(
        self,
        container_id: str,
        environment: str,
        auth,
        database: str = "public",
        base_url: str = API_BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.container_id = container_id
        self.environment = environment
        self.database = database
        self.auth = auth
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _subpath(self, operation: str) -> str:
        return (
            f"/database/{API_VERSION}/{self.container_id}/{self.environment}"
            f"/{self.database}/records/{operation}"
        )

    def _request(self, operation: str, payload: dict[str, Any]) -> dict[str, Any]:
        subpath = self._subpath(operation)
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        headers, params = self.auth.sign(subpath, body)
        headers = {**headers, "Content-Type": "application/json"}

        logger.debug("POST %s (%d bytes)", subpath, len(body))
        try:
            response = self.session.post(
                f"{self.base_url}{subpath}",
                data=body,
                headers=headers,
                params=params,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise RemoteStoreFailure(f"records/{operation} failed: {e}", cause=e) from e
        except ValueError as e:
            raise RemoteStoreFailure(f"records/{operation} returned invalid JSON", cause=e) from e

    def _checked_records(self, operation: str, data: dict[str, Any]) -> list[dict[str, Any]]:
        """Return the records of a response, failing on any per-record error."""
        records = data.get("records", [])
        for record in records:
            if "serverErrorCode" in record:
                detail = (
                    f"records/{operation} failed for '{record.get('recordName', '?')}': "
                    f"{record['serverErrorCode']} {record.get('reason', '')}".rstrip()
                )
                raise RemoteStoreFailure(detail)
        return records

    def query_records(
        self,
        record_type: str,
        desired_keys: list[str],
        continuation_marker: Optional[str] = None,
    ) -> tuple[list[dict[str, Any]], Optional[str]]:
        """
        Fetch one page of records of a type.

        Returns:
            (records, continuation marker for the next page or None)
        """
        payload: dict[str, Any] = {
            "query": {"recordType": record_type},
            "desiredKeys": desired_keys,
        }
        if continuation_marker:
            payload["continuationMarker"] = continuation_marker

        data = self._request("query", payload)
        return self._checked_records("query", data), data.get("continuationMarker")

    def query_all(self, record_type: str, desired_keys: list[str]) -> list[dict[str, Any]]:
        """Fetch every record of a type, following continuation markers."""
        logger.info("Fetch records...")
        records, marker = self.query_records(record_type, desired_keys)
        while marker:
            logger.info("Continue to fetch records...")
            page, marker = self.query_records(record_type, desired_keys, marker)
            records.extend(page)
        logger.info("Fetched %d record(s) of type %s", len(records), record_type)
        return records

    def lookup_records(self, record_names: list[str], desired_keys: list[str]) -> list[dict[str, Any]]:
        """Fetch records by name."""
        records = []
        for chunk in _chunks(list(record_names), MAX_RECORDS_PER_REQUEST):
            data = self._request("lookup", {
                "records": [{"recordName": name} for name in chunk],
                "desiredKeys": desired_keys,
            })
            records.extend(self._checked_records("lookup", data))
        return records

    def modify_records(self, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Save records, overwriting only the fields each record carries.

        Uses forceUpdate, so the server's change tag is not checked and the
        last writer wins.
        """
        saved = []
        for chunk in _chunks(list(records), MAX_RECORDS_PER_REQUEST):
            data = self._request("modify", {
                "operations": [
                    {"operationType": "forceUpdate", "record": record}
                    for record in chunk
                ],
                "atomic": False,
            })
            saved.extend(self._checked_records("modify", data))
        return saved
