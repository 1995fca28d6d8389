"""CLI entrypoint for the workflow versioning engine.

Every command prints JSON on stdout. Logs go to stderr.

Exit codes:
- 0 success
- 1 unexpected failure
- 2 configuration or input validation error
- 3 workflow, version or snapshot not found
- 4 concurrent modification conflict (safe to retry)
- 5 version store unavailable
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from workflow_versioning import __version__
from workflow_versioning.config import VersioningSettings
from workflow_versioning.errors import (
    ConcurrentModificationConflict,
    InvalidVersionFormat,
    SnapshotMissing,
    StoreUnavailable,
    VersionNotFound,
    WorkflowNotFound,
)
from workflow_versioning.logging import configure_logging
from workflow_versioning.versioning.models import ChangeRequest, WorkflowDefinition
from workflow_versioning.versioning.semver import ChangeType
from workflow_versioning.versioning.service import VersioningService

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 3
EXIT_CONFLICT = 4
EXIT_STORE_UNAVAILABLE = 5


def _parse_tags(value: str | None) -> list[str]:
    if value is None:
        return []
    parts = [p.strip() for p in value.split(",")]
    return [p for p in parts if p]


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workflow-versions",
        description="Version, diff and roll back workflow definitions",
    )
    parser.add_argument(
        "--version", action="version", version=f"workflow-versioning {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Record a definition as a new version")
    create.add_argument(
        "--definition",
        required=True,
        help="Path to the workflow definition JSON file",
    )
    create.add_argument(
        "--change-type",
        required=True,
        choices=[c.value for c in ChangeType],
        help="Which version component to bump",
    )
    create.add_argument("--description", required=True, help="What changed")
    create.add_argument(
        "--breaking",
        action="store_true",
        help="Flag the version as breaking",
    )
    create.add_argument(
        "--tags",
        default=None,
        help="Comma-separated tags, e.g. 'hotfix,q3'",
    )
    create.add_argument("--created-by", default=None, help="Author of the change")
    create.add_argument(
        "--base-version",
        default=None,
        help="Version string for the first version of a workflow (e.g. 1.0.0)",
    )

    current = subparsers.add_parser("current", help="Show the active version and definition")
    current.add_argument("document_id", help="Workflow document id")

    history = subparsers.add_parser("history", help="List versions, newest first")
    history.add_argument("document_id", help="Workflow document id")

    rollback = subparsers.add_parser(
        "rollback",
        help="Create a new version carrying the content of an earlier one",
    )
    rollback.add_argument("document_id", help="Workflow document id")
    rollback.add_argument("--to", dest="target_version", required=True, help="Version to restore")
    rollback.add_argument("--reason", required=True, help="Why the rollback is performed")
    rollback.add_argument("--performed-by", default=None, help="Who performs the rollback")

    compare = subparsers.add_parser("compare", help="Diff two versions (v1 is the older side)")
    compare.add_argument("document_id", help="Workflow document id")
    compare.add_argument("v1", help="Old version")
    compare.add_argument("v2", help="New version")

    export = subparsers.add_parser("export", help="Dump the version history as JSON")
    export.add_argument("document_id", help="Workflow document id")
    export.add_argument(
        "--output",
        default=None,
        help="Write to this file instead of stdout",
    )

    return parser


def _load_definition(path: Path) -> WorkflowDefinition:
    return WorkflowDefinition.model_validate(json.loads(path.read_text(encoding="utf-8")))


def _run(args: argparse.Namespace, service: VersioningService) -> int:
    if args.command == "create":
        definition = _load_definition(Path(args.definition))
        request = ChangeRequest(
            change_type=args.change_type,
            description=args.description,
            breaking=args.breaking,
            tags=_parse_tags(args.tags),
            base_version=args.base_version,
        )
        version = service.create_version(definition, request, created_by=args.created_by)
        _print_json(version.to_wire())
        return EXIT_OK

    if args.command == "current":
        current = service.get_current_version(args.document_id)
        if current is None:
            print(f"No active version found for {args.document_id}", file=sys.stderr)
            return EXIT_NOT_FOUND
        _print_json(current.to_wire())
        return EXIT_OK

    if args.command == "history":
        versions = service.get_version_history(args.document_id)
        _print_json([v.to_wire() for v in versions])
        return EXIT_OK

    if args.command == "rollback":
        definition = service.rollback_to_version(
            args.document_id,
            args.target_version,
            args.reason,
            performed_by=args.performed_by,
        )
        _print_json(definition.to_wire())
        return EXIT_OK

    if args.command == "compare":
        comparison = service.compare_versions(args.document_id, args.v1, args.v2)
        _print_json(comparison.to_wire())
        return EXIT_OK

    if args.command == "export":
        exported = service.export_version_history(args.document_id)
        if args.output:
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(exported + "\n", encoding="utf-8")
            logger.info("History exported", extra={"path": str(output)})
        else:
            print(exported)
        return EXIT_OK

    logger.error("Unknown command", extra={"command": args.command})
    return EXIT_INVALID


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = VersioningSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_INVALID

    configure_logging(settings.log_level)

    try:
        service = VersioningService.from_settings(settings)
        return _run(args, service)

    except (ValidationError, InvalidVersionFormat, json.JSONDecodeError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INVALID

    except (WorkflowNotFound, VersionNotFound, SnapshotMissing) as e:
        print(str(e), file=sys.stderr)
        return EXIT_NOT_FOUND

    except ConcurrentModificationConflict as e:
        logger.warning(str(e), extra={"document_id": e.document_id})
        print(f"{e} (retry the command)", file=sys.stderr)
        return EXIT_CONFLICT

    except StoreUnavailable as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
        return EXIT_STORE_UNAVAILABLE

    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return EXIT_INVALID

    except Exception:
        logger.exception("Command failed")
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
