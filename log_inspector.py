"""CLI log inspector — dump, hex-dump or count records in a binary log."""

import argparse
import json
import sys

from tlvlog.errors import DecodeError
from tlvlog.hexcodec import hex_encode
from tlvlog.record import decode_record, read_raw_record


def iter_raw(path: str):
    """Yield (offset, raw record bytes) for every record in *path*."""
    with open(path, "rb") as f:
        position = 0
        while True:
            raw = read_raw_record(f, position)
            if raw is None:
                return
            yield position, raw
            position += len(raw)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Inspect binary TLV log files")
    parser.add_argument("file", help="Binary log file")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--dump", action="store_true", help="Print each record as JSON")
    group.add_argument("--hex", action="store_true", help="Print each raw record as hex")
    group.add_argument("--count", action="store_true", help="Print the number of records")
    args = parser.parse_args(argv)

    count = 0
    try:
        for position, raw in iter_raw(args.file):
            if args.dump:
                try:
                    record, _ = decode_record(raw)
                except DecodeError as exc:
                    exc.offset += position
                    raise
                print(json.dumps(record.to_dict()))
            elif args.hex:
                print(hex_encode(raw))
            count += 1
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except DecodeError as e:
        print(f"Error: corrupt record after {count} good record(s): {e}", file=sys.stderr)
        return 1

    if args.count:
        print(count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
