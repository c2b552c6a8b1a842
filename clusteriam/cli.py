"""Clusteriam CLI: reconcile cluster IAM roles from the command line.

Local state is kept in a JSON file so successive invocations can diff
against what was last applied.

Usage examples::

    clusteriam --state roles.json create --cluster-identifier analytics \\
        --iam-role arn:aws:iam::123456789012:role/loader
    clusteriam --state roles.json update --iam-role arn:aws:iam::123456789012:role/unloader
    clusteriam --state roles.json delete

``update`` replaces the attachments with exactly the roles given: a role
left out is detached, and leaving out ``--default-iam-role-arn`` clears
the default role.
"""

from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from pathlib import Path
from typing import Any


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ``clusteriam`` CLI.

    Returns:
        Configured :class:`~argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="clusteriam",
        description="Reconcile IAM role attachments on a Redshift cluster",
    )
    parser.add_argument(
        "--provider", "-p",
        default="aws",
        choices=["aws"],
        help="Cloud provider",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default="{}",
        help='JSON config string (e.g. \'{"region_name":"us-east-1"}\')',
    )
    parser.add_argument(
        "--state", "-s",
        required=True,
        type=Path,
        help="Path of the JSON local state file",
    )
    parser.add_argument(
        "operation",
        choices=["create", "read", "update", "delete", "import"],
        help="Lifecycle operation to run",
    )
    parser.add_argument(
        "--cluster-identifier",
        help="Cluster identifier (create, import)",
    )
    parser.add_argument(
        "--iam-role",
        action="append",
        default=None,
        dest="iam_roles",
        help=(
            "IAM role ARN to attach; repeat for several (create, update). "
            "update takes the full desired set: roles not listed are detached, "
            "so update without --iam-role detaches every role"
        ),
    )
    parser.add_argument(
        "--default-iam-role-arn",
        default=None,
        help=(
            "Default IAM role ARN (create, update). "
            "update without it clears the default role"
        ),
    )
    return parser


def _load_state(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    return json.loads(path.read_text())


def _save_state(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses arguments, builds a controller via :func:`build_controller`,
    runs the requested lifecycle operation against the state file and
    prints the resulting state as JSON.  SIGINT/SIGTERM cancel an
    in-progress wait.

    Args:
        argv: Optional argument list (defaults to ``sys.argv``).
    """
    parser = _build_parser()
    ns = parser.parse_args(argv)

    try:
        config: dict[str, Any] = json.loads(ns.config)
    except json.JSONDecodeError as e:
        print(f"Invalid --config JSON: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        saved = _load_state(ns.state)
    except json.JSONDecodeError as e:
        print(f"Invalid state file {ns.state}: {e}", file=sys.stderr)
        sys.exit(1)

    # Lazy-import to avoid loading the SDK before arguments are valid
    from clusteriam.base.exceptions import ReconcileError
    from clusteriam.base.types import AttachmentSet
    from clusteriam.factory import build_controller
    from clusteriam.reconcile.state import ResourceState

    try:
        controller = build_controller(ns.provider, config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    cancel = threading.Event()
    previous: dict[int, Any] = {}
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGINT, signal.SIGTERM):
            previous[sig] = signal.signal(sig, lambda *_: cancel.set())

    try:
        state = ResourceState.from_dict(saved)
        if ns.operation == "create":
            if state.exists:
                print(f"Resource already exists: {state.id}", file=sys.stderr)
                sys.exit(1)
            if not ns.cluster_identifier:
                print("--cluster-identifier is required for create", file=sys.stderr)
                sys.exit(1)
            state = ResourceState(
                cluster_identifier=ns.cluster_identifier,
                iam_roles=AttachmentSet(ns.iam_roles or ()),
                default_iam_role_arn=ns.default_iam_role_arn,
            )
            try:
                controller.create(state, cancel=cancel)
            finally:
                # Keep an adopted identity even when waiting failed.
                if state.exists:
                    _save_state(ns.state, state.to_dict())
        elif ns.operation == "import":
            if not ns.cluster_identifier:
                print("--cluster-identifier is required for import", file=sys.stderr)
                sys.exit(1)
            state = controller.import_state(ns.cluster_identifier)
            if not state.exists:
                print(f"Cluster not found: {ns.cluster_identifier}", file=sys.stderr)
                sys.exit(1)
            _save_state(ns.state, state.to_dict())
        elif not state.exists:
            print(f"No resource in state file {ns.state}", file=sys.stderr)
            sys.exit(1)
        elif ns.operation == "read":
            controller.read(state)
            _save_state(ns.state, state.to_dict())
        elif ns.operation == "update":
            try:
                controller.update(
                    state,
                    ns.iam_roles or (),
                    ns.default_iam_role_arn,
                    cancel=cancel,
                )
            finally:
                _save_state(ns.state, state.to_dict())
        else:
            controller.delete(state, cancel=cancel)
            _save_state(ns.state, state.to_dict())
    except ReconcileError as e:
        print(f"Operation failed: {e}", file=sys.stderr)
        sys.exit(130 if e.cancelled else 1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    print(json.dumps(state.to_dict(), indent=2))


if __name__ == "__main__":
    main()
