"""
Command-line tool for inspecting what a transaction would send to the
search index.

    python -m graphsync.cli translate snapshot.json --index-spec "people:Person(name)"

Prints the ``_bulk`` NDJSON body on stdout. With ``--dispatch`` the request
is also sent (synchronously) to the configured cluster.
"""

import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

# Keep stdout clean for the NDJSON body
os.environ.setdefault("GRAPHSYNC_STDERR_LOGGING", "1")

from graphsync.dispatch.adapter import DispatchAdapter  # noqa: E402
from graphsync.dispatch.transport import HttpBulkTransport  # noqa: E402
from graphsync.extension import build_engine  # noqa: E402
from graphsync.indexing.index_spec import IndexSpecError, IndexSpecTable  # noqa: E402
from graphsync.indexing.records import InMemorySnapshot  # noqa: E402
from graphsync.shared.config import get_config, get_settings  # noqa: E402
from graphsync.shared.observability import get_logger, setup_logging  # noqa: E402

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="graphsync", description="Graph to search index synchronization tools"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    translate = sub.add_parser(
        "translate", help="Translate a JSON transaction snapshot into a bulk body"
    )
    translate.add_argument("snapshot", type=Path, help="Path to snapshot JSON")
    translate.add_argument("--index-spec", help="Override the configured index spec")
    translate.add_argument("--index-all", help="Override the catch-all index")
    translate.add_argument(
        "--no-id-field", action="store_true", help="Omit the id field from documents"
    )
    translate.add_argument(
        "--no-labels-field",
        action="store_true",
        help="Omit the labels field from documents",
    )
    translate.add_argument(
        "--include-type", action="store_true", help="Emit _type in action lines"
    )
    translate.add_argument(
        "--dispatch", action="store_true", help="Also send the request to the cluster"
    )
    translate.add_argument("--host", help="Override the cluster address")
    return parser


def cmd_translate(args: argparse.Namespace) -> int:
    config = get_config()
    indexing = config.indexing

    try:
        table = IndexSpecTable.from_spec_string(
            args.index_spec if args.index_spec is not None else indexing.index_spec,
            catch_all_index=args.index_all if args.index_all is not None else indexing.index_all,
            include_id_field=indexing.include_id_field and not args.no_id_field,
            include_labels_field=indexing.include_labels_field
            and not args.no_labels_field,
        )
    except IndexSpecError as e:
        print(f"Invalid index spec: {e}", file=sys.stderr)
        return 2

    with open(args.snapshot, "r") as f:
        snapshot = InMemorySnapshot.from_dict(json.load(f))

    operations = build_engine(table).translate(snapshot)
    request = DispatchAdapter.build_request(operations)
    include_type = args.include_type or config.elasticsearch.include_type
    if request.operations:
        sys.stdout.write(request.to_ndjson(include_type=include_type))

    if not args.dispatch or not request.operations:
        return 0

    es = config.elasticsearch
    transport = HttpBulkTransport(
        args.host or es.host_name,
        read_timeout=es.read_timeout_seconds,
        max_workers=1,
        include_type=include_type,
    )
    try:
        future = DispatchAdapter(transport, use_async=False).dispatch(operations)
    finally:
        transport.close()
    result = future.result() if future else None
    return 0 if result is not None and result.succeeded else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings().log_level)
    if args.command == "translate":
        return cmd_translate(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
