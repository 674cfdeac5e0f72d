#!/usr/bin/env python3
"""
strings-sync - Keep .lproj string bundles and CloudKit records in sync

English is the canonical locale: keys English does not define are dropped
when a bundle is read.

Commands:
    upload       - Diff two bundle snapshots and upload the changes
    synchronize  - Fetch all records and overwrite a local bundle
    diff         - Show the changes between two bundle snapshots

Example Workflow:
    1. strings-sync diff old/ new/
       → Returns: added / removed / changed keys

    2. strings-sync upload old/ new/ localizedStrings --english-key title --api-token $TOKEN
       → Returns: number of records saved

    3. strings-sync synchronize Resources/ Article localizedStrings --english-key title --api-token $TOKEN
       → Returns: written file paths
"""

import argparse
import json
import logging
import sys

from .bundle import read_bundle, write_bundle
from .cloudkit import CloudKitClient
from .config import ENVIRONMENTS, SyncConfig, load_config, resolve_auth
from .diff import ChangeSet, diff
from .remote import FieldMapping, RemoteStringStore
from .transform import to_key_major, to_locale_major

logger = logging.getLogger(__name__)


def load_changes(old_path: str, new_path: str) -> ChangeSet:
    """Read two bundle snapshots and diff them."""
    old_strings = to_key_major(read_bundle(old_path))
    new_strings = to_key_major(read_bundle(new_path))
    return diff(old_strings, new_strings)


def build_config(args) -> SyncConfig:
    return load_config(
        args.config,
        container_id=args.container,
        environment=args.environment,
        api_token=args.api_token,
        key_id=args.key_id,
        key_file_path=args.key_file_path,
    )


def build_store(config: SyncConfig, mapping: FieldMapping) -> RemoteStringStore:
    """Create the remote store for a configuration."""
    client = CloudKitClient(
        container_id=config.container_id,
        environment=config.environment,
        auth=resolve_auth(config),
        database=config.database,
        base_url=config.base_url,
        timeout=config.timeout,
    )
    return RemoteStringStore(client, mapping)


def cmd_diff(args) -> dict:
    """Show the changes between two bundle snapshots."""
    changes = load_changes(args.old_path, args.new_path)
    return {
        "status": "ok",
        **changes.summary(),
    }


def cmd_upload(args) -> dict:
    """Diff two bundle snapshots and upload added/changed strings."""
    changes = load_changes(args.old_path, args.new_path)
    summary = changes.summary()

    if args.dry_run:
        return {
            "status": "ok",
            "dry_run": True,
            **summary,
        }

    store = build_store(build_config(args), FieldMapping(args.main_key, args.english_key))
    saved = store.upload_changes(changes)
    return {
        "status": "ok",
        "saved": saved,
        "counts": summary["counts"],
        "summary": f"{saved} record(s) saved.",
    }


def cmd_synchronize(args) -> dict:
    """Fetch all records and overwrite the local bundle."""
    store = build_store(build_config(args), FieldMapping(args.main_key, args.english_key))
    strings_by_key = store.fetch_strings(args.record_type)
    written = write_bundle(to_locale_major(strings_by_key), args.path)
    return {
        "status": "ok",
        "keys": len(strings_by_key),
        "files": [str(path) for path in written],
        "summary": f"{len(strings_by_key)} key(s) written to {len(written)} locale file(s).",
    }


def _add_remote_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("main_key", help="Record field holding the JSON encoded translations")
    parser.add_argument("--english-key", help="Record field holding the English value, if stored separately")
    parser.add_argument("--key-file-path", help="The key file path for CloudKit.")
    parser.add_argument("--key-id", help="The key ID for CloudKit.")
    parser.add_argument("--api-token", help="The API token for CloudKit.")
    parser.add_argument("--container", help="CloudKit container identifier")
    parser.add_argument("--environment", choices=ENVIRONMENTS, help="CloudKit environment")


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="strings-sync",
        description="strings-sync - Keep .lproj string bundles and CloudKit records in sync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Authentication (upload, synchronize):
  --key-id + --key-file-path   server-to-server key pair
  --api-token                  container API token
  Both may also come from --config or STRINGSYNC_KEY_ID / STRINGSYNC_KEY_FILE / STRINGSYNC_API_TOKEN.

Examples:
  # Preview what an upload would change
  strings-sync upload old/ new/ localizedStrings --dry-run

  # Upload, English stored in its own field
  strings-sync upload old/ new/ localizedStrings --english-key title --api-token $TOKEN

  # Overwrite a local bundle with the remote strings
  strings-sync synchronize Resources/ Article localizedStrings --key-id $KEY_ID --key-file-path eckey.pem
        """,
    )
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="Log progress (-vv for debug)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # upload command
    upload_parser = subparsers.add_parser("upload", help="Upload changes between two bundle snapshots")
    upload_parser.add_argument("old_path", help="Bundle directory before the changes")
    upload_parser.add_argument("new_path", help="Bundle directory after the changes")
    _add_remote_options(upload_parser)
    upload_parser.add_argument("--dry-run", action="store_true", help="Report changes without uploading")

    # synchronize command
    sync_parser = subparsers.add_parser("synchronize", help="Overwrite a local bundle with remote strings")
    sync_parser.add_argument("path", help="Bundle directory to write")
    sync_parser.add_argument("record_type", help="CloudKit record type to fetch")
    _add_remote_options(sync_parser)

    # diff command
    diff_parser = subparsers.add_parser("diff", help="Show changes between two bundle snapshots")
    diff_parser.add_argument("old_path", help="Bundle directory before the changes")
    diff_parser.add_argument("new_path", help="Bundle directory after the changes")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    try:
        if args.command == "upload":
            result = cmd_upload(args)
        elif args.command == "synchronize":
            result = cmd_synchronize(args)
        elif args.command == "diff":
            result = cmd_diff(args)
        print(json.dumps(result, indent=2, ensure_ascii=False))
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(json.dumps({
            "status": "error",
            "error": str(e),
            "error_type": type(e).__name__,
        }), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
