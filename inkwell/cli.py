"""
Inkwell CLI — Local administration of the document, image and user stores.

Commands:
- inkwell init          — Create storage directories and an empty user registry
- inkwell list          — List documents with their latest version
- inkwell show          — Print a document (latest or --version N)
- inkwell versions      — Version history of a document, newest first
- inkwell create        — Create a document (empty or from --file)
- inkwell edit          — Save a new version from --file
- inkwell duplicate     — Copy a document to NAME-copy.EXT
- inkwell rename        — Move a document and all its versions
- inkwell delete        — Delete a document and all its versions
- inkwell images        — List images
- inkwell upload        — Upload an image file
- inkwell remove-image  — Delete an image
- inkwell add-user      — Register a user (password prompted if not given)
- inkwell remove-user   — Remove a user
- inkwell audit         — Show recent audit-trail entries

The CLI runs as a trusted local administrator: every call into the
content manager is made with ``authenticated=True``.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from collections import deque
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from inkwell.engine.config import InkwellConfig, load_config
from inkwell.engine.errors import InkwellConfigError, InkwellStorageError
from inkwell.engine.logging import OBJECT_TYPE_CATEGORIES, FileLogger, init_logging, log, log_system_event
from inkwell.engine.paths import PathResolver
from inkwell.engine.results import OperationResult
from inkwell.manager import ContentManager

logger = logging.getLogger("inkwell.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="inkwell",
        description="Inkwell — Versioned document manager",
    )
    parser.add_argument("--config", help="Path to inkwell.yaml (default: auto-discover)")
    parser.add_argument("--mode", choices=["normal", "test"], help="Override site.mode")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create storage directories and user registry")
    subparsers.add_parser("list", help="List documents")

    show_parser = subparsers.add_parser("show", help="Print a document")
    show_parser.add_argument("name", help="Document name (e.g., about.md)")
    show_parser.add_argument("--version", help="Version number (default: latest)")
    show_parser.add_argument("--raw", action="store_true", help="Print source instead of rendered output")

    versions_parser = subparsers.add_parser("versions", help="Version history of a document")
    versions_parser.add_argument("name", help="Document name")

    create_parser = subparsers.add_parser("create", help="Create a document")
    create_parser.add_argument("name", help="New document name including extension")
    create_parser.add_argument("--file", help="Initial content from this file (default: empty)")

    edit_parser = subparsers.add_parser("edit", help="Save a new version of a document")
    edit_parser.add_argument("name", help="Document name")
    edit_parser.add_argument("--file", required=True, help="File holding the new content ('-' for stdin)")

    duplicate_parser = subparsers.add_parser("duplicate", help="Duplicate a document")
    duplicate_parser.add_argument("name", help="Document name")

    rename_parser = subparsers.add_parser("rename", help="Rename a document")
    rename_parser.add_argument("name", help="Current document name")
    rename_parser.add_argument("new_name", help="New document name")

    delete_parser = subparsers.add_parser("delete", help="Delete a document and all versions")
    delete_parser.add_argument("name", help="Document name")

    subparsers.add_parser("images", help="List images")

    upload_parser = subparsers.add_parser("upload", help="Upload an image")
    upload_parser.add_argument("file", help="Image file to upload")
    upload_parser.add_argument("--name", help="Stored image name (default: the file's name)")

    remove_image_parser = subparsers.add_parser("remove-image", help="Delete an image")
    remove_image_parser.add_argument("name", help="Image name")

    add_user_parser = subparsers.add_parser("add-user", help="Register a user")
    add_user_parser.add_argument("username", help="Username")
    add_user_parser.add_argument("--password", help="Password (prompted if not provided)")

    remove_user_parser = subparsers.add_parser("remove-user", help="Remove a user")
    remove_user_parser.add_argument("username", help="Username")

    audit_parser = subparsers.add_parser("audit", help="Show recent audit-trail entries")
    audit_parser.add_argument("--type", dest="object_type", default="documents",
                              choices=sorted(OBJECT_TYPE_CATEGORIES), help="Object type (default: documents)")
    audit_parser.add_argument("--category", default="execution", choices=["execution", "security"],
                              help="Log category (default: execution)")
    audit_parser.add_argument("--resource", help="Only entries for this document / image / user")
    audit_parser.add_argument("--event", help="Only entries for this event (e.g., document_save)")
    audit_parser.add_argument("--days", type=int, default=7, help="How many days back to read (default: 7)")
    audit_parser.add_argument("--limit", type=int, default=20, help="Show at most the N newest entries")

    args = parser.parse_args(argv)

    commands = {
        "init": cmd_init,
        "list": cmd_list,
        "show": cmd_show,
        "versions": cmd_versions,
        "create": cmd_create,
        "edit": cmd_edit,
        "duplicate": cmd_duplicate,
        "rename": cmd_rename,
        "delete": cmd_delete,
        "images": cmd_images,
        "upload": cmd_upload,
        "remove-image": cmd_remove_image,
        "add-user": cmd_add_user,
        "remove-user": cmd_remove_user,
        "audit": cmd_audit,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        config = load_config(args.config, mode=args.mode)
    except InkwellConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if config.logging.audit:
        init_logging(config.logging.directory, level=config.logging.level)

    try:
        return handler(args, config)
    except InkwellStorageError as e:
        logger.error(e.to_json())
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _manager(config: InkwellConfig) -> ContentManager:
    return ContentManager.from_config(config)


def _report(result: OperationResult, success_message: str) -> int:
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    print(success_message)
    return 0


def _read_content(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def cmd_init(args: argparse.Namespace, config: InkwellConfig) -> int:
    """
    Bootstrap storage:
    1. Create the document and image roots
    2. Create an empty user registry if none exists
    """
    paths = PathResolver.from_config(config).storage_paths()
    print(f"Initializing Inkwell storage ({config.mode} mode)...")
    try:
        paths.documents_root.mkdir(parents=True, exist_ok=True)
        paths.images_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Error: could not create storage directories: {e}", file=sys.stderr)
        return 1

    created = _manager(config).users.initialize()
    print(f"  Documents: {paths.documents_root}")
    print(f"  Images:    {paths.images_root}")
    print(f"  Users:     {paths.credentials_file}{' (created)' if created else ''}")
    log(log_system_event("storage_initialized", details={"mode": config.mode}))
    return 0


def cmd_list(args: argparse.Namespace, config: InkwellConfig) -> int:
    documents = _manager(config).list_documents()
    if not documents:
        print("No documents.")
        return 0
    for doc in documents:
        print(f"{doc.name}\tv{doc.latest_version}\t{doc.content_type}")
    return 0


def cmd_show(args: argparse.Namespace, config: InkwellConfig) -> int:
    manager = _manager(config)
    if args.raw:
        result = manager.document_source(args.name, args.version)
        if result.ok:
            print(result.value, end="")
    else:
        result = manager.view_document(args.name, args.version)
        if result.ok:
            print(result.value.body, end="")
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    return 0


def cmd_versions(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).document_history(args.name)
    if not result.ok:
        print(f"Error: {result.message}", file=sys.stderr)
        return 1
    for record in result.value:
        modified = record.modified_at.isoformat() if record.modified_at else "-"
        print(f"{record.version}\t{record.size_bytes} bytes\t{modified}")
    return 0


def cmd_create(args: argparse.Namespace, config: InkwellConfig) -> int:
    content = _read_content(args.file) if args.file else ""
    result = _manager(config).create_document(args.name, content, authenticated=True)
    return _report(result, f"{result.value} was created.")


def cmd_edit(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).update_document(args.name, _read_content(args.file), authenticated=True)
    return _report(result, f"{args.name} has been updated (version {result.value}).")


def cmd_duplicate(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).duplicate_document(args.name, authenticated=True)
    return _report(result, f"Duplicated {args.name} as {result.value}.")


def cmd_rename(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).rename_document(args.name, args.new_name, authenticated=True)
    return _report(result, f"Renamed {args.name} to {result.value}.")


def cmd_delete(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).delete_document(args.name, authenticated=True)
    return _report(result, f"{args.name} has been deleted.")


def cmd_images(args: argparse.Namespace, config: InkwellConfig) -> int:
    images = _manager(config).list_images()
    if not images:
        print("No images.")
        return 0
    for image in images:
        print(f"{image.name}\t{image.size_bytes} bytes\t{image.mime_type}")
    return 0


def cmd_upload(args: argparse.Namespace, config: InkwellConfig) -> int:
    source = Path(args.file)
    if not source.is_file():
        print(f"Error: {source} is not a file", file=sys.stderr)
        return 1
    name = args.name if args.name is not None else source.name
    with open(source, "rb") as payload:
        result = _manager(config).upload_image(name, payload, authenticated=True)
    return _report(result, f"{name} was uploaded.")


def cmd_remove_image(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).delete_image(args.name, authenticated=True)
    return _report(result, f"{args.name} has been deleted.")


def cmd_add_user(args: argparse.Namespace, config: InkwellConfig) -> int:
    if args.password is not None:
        password = confirm = args.password
    else:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
    result = _manager(config).register_user(args.username, password, confirm)
    return _report(result, f"Created user {args.username}.")


def cmd_remove_user(args: argparse.Namespace, config: InkwellConfig) -> int:
    result = _manager(config).delete_user(args.username, authenticated=True)
    return _report(result, f"User {args.username} has been deleted.")


def cmd_audit(args: argparse.Namespace, config: InkwellConfig) -> int:
    """Print the newest audit entries, oldest of them first."""
    audit = FileLogger(log_dir=config.logging.directory)
    since = date.today() - timedelta(days=args.days)
    entries = deque(
        audit.entries(args.object_type, args.category, since=since, resource=args.resource, event=args.event),
        maxlen=max(args.limit, 0),
    )
    if not entries:
        print("No audit entries.")
        return 0
    for entry in entries:
        outcome = "ok" if entry.get("success", True) else f"FAILED {entry.get('error', '')}".rstrip()
        print(f"{entry.get('timestamp', '-')}\t{entry.get('event')}\t{entry.get('resource', '')}\t{outcome}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
