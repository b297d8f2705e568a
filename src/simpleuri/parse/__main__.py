import argparse
import dataclasses
import json
import sys

from typing import Sequence

from .parse import ParsedUri, parse_uri


def printable(text: str) -> str:
    """Undecodable argv bytes come through as lone surrogates; show them as escapes instead of failing to print."""
    return text.encode("utf-8", errors="backslashreplace").decode("utf-8")


def describe(uri: ParsedUri) -> list[str]:
    lines: list[str] = [
        f"scheme: {uri.scheme}",
        f"authority: {uri.authority.authority}",
        f"userinfo: {uri.authority.userinfo}",
        f"host: {uri.authority.host}",
        f"port: {uri.authority.port}",
        f"path: {uri.path}",
        f"query_string: {uri.query_string}",
        f"query: {len(uri.query)}",
    ]
    lines.extend(f"  {key}: {value}" for key, value in uri.query.items())
    lines.append(f"fragment: {uri.fragment}")
    return lines


def as_json(uri: ParsedUri) -> str:
    fields = dataclasses.asdict(uri)
    fields["error"] = uri.error.value
    return json.dumps(fields)


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="python -m simpleuri.parse", description="Split URIs into their parts")
    ap.add_argument("uris", nargs="+", metavar="URI", help="URI to take apart")
    ap.add_argument("--json", action="store_true", help="print one JSON object per URI")
    args = ap.parse_args(argv)

    status = 0
    for raw in args.uris:
        uri = parse_uri(raw)
        if not uri.ok:
            print(printable(f"{raw}: {uri.error.value}"), file=sys.stderr)
            status = 1
            continue
        if args.json:
            print(as_json(uri))
        else:
            print(printable("\n".join(describe(uri))))
    return status


if __name__ == "__main__":
    sys.exit(main())
