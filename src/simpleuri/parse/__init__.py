__version__ = "0.1"

from .parse import Authority, ErrorKind, Failed, Parsed, ParsedUri, parse_authority, parse_fragment, parse_path, parse_query, parse_query_string, parse_scheme, parse_uri
