from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export or import the BOMSO organizations/requests dataset.")
    parser.add_argument(
        "--data-file",
        default=None,
        help="Operate on this JSON data file instead of the configured storage backend.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    export_cmd = sub.add_parser("export", help="Write the full dataset document to PATH.")
    export_cmd.add_argument("path")
    import_cmd = sub.add_parser("import", help="Replace the live dataset with the document at PATH.")
    import_cmd.add_argument("path")
    return parser


def main(argv: list[str] | None = None) -> int:
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

    from bomso.domain.errors import DomainError
    from bomso.services import dataset_service
    from bomso.storage import get_store
    from bomso.storage.file_store import JsonFileStore

    args = _build_parser().parse_args(argv)
    store = JsonFileStore(args.data_file) if args.data_file else get_store()
    try:
        if args.command == "export":
            document = dataset_service.export_dataset(store)
            Path(args.path).write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
            print(f"exported {len(document['organizations'])} organizations, {len(document['requests'])} requests")
            return 0
        try:
            document = json.loads(Path(args.path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            print(f"cannot read {args.path}: {exc}", file=sys.stderr)
            return 1
        dataset = dataset_service.import_dataset(store, document)
        print(f"imported {len(dataset.organizations)} organizations, {len(dataset.requests)} requests")
        return 0
    except DomainError as exc:
        print(f"{exc.error_code}: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
