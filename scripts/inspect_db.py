#!/usr/bin/env python3
"""Small CLI to decode an nsdb snapshot file and print its contents.

The file is only read: unlike `open_db`, an empty file is reported as empty
rather than initialised. Pickle snapshots execute code when loaded, so only
inspect files you trust.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from nsdb.errors import CorruptSnapshotError
from nsdb.serializer import create_serializer, decode_store


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Decode an nsdb snapshot file and show its contents")
    p.add_argument("path", help="Path to the snapshot file")
    p.add_argument("-s", "--serializer", default="pickle", help="Serializer the file was written with (default: pickle)")
    p.add_argument("-p", "--password", help="Password for the encrypted serializer")
    p.add_argument("-k", "--key", help="Fernet key for the encrypted serializer")
    p.add_argument("-n", "--namespace", help="Only show this namespace")
    p.add_argument("-j", "--json", action="store_true", help="Dump the contents as JSON")
    return p.parse_args(argv)


def format_text(store: dict) -> str:
    lines = []
    for ns in sorted(store):
        lines.append(f"[{ns}]")
        for key in sorted(store[ns]):
            lines.append(f"  {key} = {store[ns][key]}")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    path = Path(args.path)

    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 2

    data = path.read_bytes()
    if data:
        key = args.key.encode("ascii") if args.key else None
        try:
            serializer = create_serializer(args.serializer, password=args.password, key=key)
        except ValueError as exc:
            print(f"Invalid serializer options: {exc}", file=sys.stderr)
            return 4
        try:
            store = decode_store(data, serializer)
        except CorruptSnapshotError as exc:
            print(f"Failed to decode '{path}': {exc}", file=sys.stderr)
            return 3
    else:
        store = {}

    if args.namespace is not None:
        store = {args.namespace: store[args.namespace]} if store.get(args.namespace) else {}

    if args.json:
        print(json.dumps(store, indent=2, sort_keys=True))
    else:
        print(format_text(store))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
