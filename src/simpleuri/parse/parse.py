"""simpleuri.parse
A small, forgiving URI decomposer.
Follows the generic syntax of RFC 3986, but only the scheme and the port are validated.
"""

import dataclasses
import enum
import re

from typing import Generic, Self, TypeVar

T = TypeVar("T")

# ALPHA = %x41-5A / %x61-7A
_ALPHA: str = r"[A-Za-z]"

# DIGIT = %x30-39
_DIGIT: str = r"[0-9]"

# Looser than RFC 3986, which wants ALPHA first:
# scheme = *( ALPHA / DIGIT / "+" / "-" / "." )
_SCHEME: str = rf"(?:{_ALPHA}|{_DIGIT}|[+\-.])+"
_SCHEME_PAT: re.Pattern[str] = re.compile(_SCHEME)

# port = *DIGIT
_PORT: str = rf"{_DIGIT}*"
_PORT_PAT: re.Pattern[str] = re.compile(_PORT)

_PATH_END_PAT: re.Pattern[str] = re.compile(r"[?#]")

# Any of these ends a query pair.
_QUERY_SEPARATOR_PAT: re.Pattern[str] = re.compile(r"[&;?]")

_DEFAULT_ENCODING: str = "utf-8"


class ErrorKind(enum.Enum):
    NONE = "none"
    INVALID_SCHEME = "invalid-scheme"
    INVALID_PORT = "invalid-port"


@dataclasses.dataclass(frozen=True)
class Authority:
    """The part between "//" and the next "/". port == 0 means no port was given."""

    authority: str = ""
    userinfo: str = ""
    host: str = ""
    port: int = 0

    @property
    def has_port(self: Self) -> bool:
        return self.port != 0


@dataclasses.dataclass(frozen=True)
class ParsedUri:
    """The result of parse_uri. Check error (or ok) before trusting the other fields."""

    error: ErrorKind = ErrorKind.NONE
    scheme: str = ""
    authority: Authority = dataclasses.field(default_factory=Authority)
    path: str = ""
    query: dict[str, str] = dataclasses.field(default_factory=dict)
    query_string: str = ""
    fragment: str = ""

    @property
    def ok(self: Self) -> bool:
        return self.error is ErrorKind.NONE


@dataclasses.dataclass(frozen=True)
class Parsed(Generic[T]):
    """A stage succeeded. rest is the input left for the next stage."""

    value: T
    rest: str
    delimiter: str = ""


@dataclasses.dataclass(frozen=True)
class Failed(Generic[T]):
    """A stage gave up. partial is whatever the stage had built so far; rest is the input it was given."""

    error: ErrorKind
    partial: T
    rest: str = ""


def _parse_port(data: str) -> int | None:
    """Returns the port as an int, or None if data isn't made of decimal digits only, or has too many to convert.
    An empty port is allowed and means "unspecified".
    """
    if _PORT_PAT.fullmatch(data) is None:
        return None
    # Leading zeros are allowed, but past that the digits have to fit int()'s conversion limit.
    digits: str = data.lstrip("0")
    if len(digits) == 0:
        return 0
    try:
        return int(digits, base=10)
    except ValueError:
        return None


def parse_scheme(data: str) -> Parsed[str] | Failed[str]:
    """Everything before the first ":" is the scheme. Scheme names are case-insensitive, so they come back lowercased."""
    scheme, colon, rest = data.partition(":")
    if len(colon) == 0 or _SCHEME_PAT.fullmatch(scheme) is None:
        return Failed(ErrorKind.INVALID_SCHEME, "", data)
    return Parsed(scheme.lower(), rest)


def parse_authority(data: str) -> Parsed[Authority] | Failed[Authority]:
    """authority = [ userinfo "@" ] host [ ":" port ]
    The authority is optional. Without a leading "//" the input is passed through untouched.
    """
    if not data.startswith("//"):
        return Parsed(Authority(), data)

    raw, slash, rest = data[len("//") :].partition("/")
    rest = slash + rest

    userinfo: str = ""
    host: str = raw
    if "@" in raw:
        userinfo, _, host = raw.partition("@")

    # IP literals carry their own colons, so there is no port to look for.
    if host.startswith("["):
        return Parsed(Authority(authority=raw, userinfo=userinfo, host=host), rest)

    host, colon, raw_port = host.partition(":")
    port: int | None = 0
    if len(colon) > 0:
        port = _parse_port(raw_port)
    if port is None:
        return Failed(ErrorKind.INVALID_PORT, Authority(authority=raw, userinfo=userinfo, host=host), data)
    return Parsed(Authority(authority=raw, userinfo=userinfo, host=host, port=port), rest)


def parse_path(data: str) -> Parsed[str]:
    """The path runs up to the first "?" or "#". The delimiter is consumed, and remembered."""
    m: re.Match[str] | None = _PATH_END_PAT.search(data)
    if m is None:
        return Parsed(data, "")
    return Parsed(data[: m.start()], data[m.end() :], delimiter=m[0])


def parse_query_string(query_string: str) -> dict[str, str]:
    """Splits a raw query into key/value pairs.
    "&", ";" and "?" all separate pairs. A pair without "=" gets an empty value. Later keys win.
    Nothing is decoded.
    """
    result: dict[str, str] = {}
    while len(query_string) > 0:
        m: re.Match[str] | None = _QUERY_SEPARATOR_PAT.search(query_string)
        if m is None:
            pair, query_string = query_string, ""
        else:
            pair, query_string = query_string[: m.start()], query_string[m.end() :]
        key, _, value = pair.partition("=")
        result[key] = value
    return result


def parse_query(data: str) -> Parsed[tuple[dict[str, str], str]]:
    """The query runs up to the first "#". The value is (mapping, raw query string)."""
    query_string, _, rest = data.partition("#")
    return Parsed((parse_query_string(query_string), query_string), rest)


def parse_fragment(data: str) -> Parsed[str]:
    return Parsed(data, "")


class _Builder:
    """Collects stage output. build() is the only place a ParsedUri gets made."""

    def __init__(self: Self) -> None:
        self.scheme: str = ""
        self.authority: Authority = Authority()
        self.path: str = ""
        self.query: dict[str, str] = {}
        self.query_string: str = ""
        self.fragment: str = ""

    def build(self: Self, error: ErrorKind = ErrorKind.NONE) -> ParsedUri:
        return ParsedUri(
            error=error,
            scheme=self.scheme,
            authority=self.authority,
            path=self.path,
            query=self.query,
            query_string=self.query_string,
            fragment=self.fragment,
        )


def _decode(data: str | bytes) -> str:
    if isinstance(data, bytes):
        return data.decode(_DEFAULT_ENCODING, errors="surrogateescape")
    if not isinstance(data, str):
        raise TypeError(f"expected str or bytes, not {type(data).__name__}")
    return data


def parse_uri(data: str | bytes) -> ParsedUri:
    """Splits a URI into scheme, authority, path, query and fragment.
    Never raises on malformed input; look at the error field instead.
    On failure, only the stages before the failing one (and the failing stage's partial output) are filled in.
    """
    builder: _Builder = _Builder()

    scheme: Parsed[str] | Failed[str] = parse_scheme(_decode(data))
    if isinstance(scheme, Failed):
        return builder.build(scheme.error)
    builder.scheme = scheme.value

    authority: Parsed[Authority] | Failed[Authority] = parse_authority(scheme.rest)
    if isinstance(authority, Failed):
        builder.authority = authority.partial
        return builder.build(authority.error)
    builder.authority = authority.value

    path: Parsed[str] = parse_path(authority.rest)
    builder.path = path.value

    rest: str = path.rest
    # After "path#frag" there is no query, only a fragment.
    if path.delimiter != "#":
        query: Parsed[tuple[dict[str, str], str]] = parse_query(rest)
        builder.query, builder.query_string = query.value
        rest = query.rest

    builder.fragment = parse_fragment(rest).value
    return builder.build()
