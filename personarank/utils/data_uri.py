"""
Data URI helpers

Images and audio travel between browser and backend as
`data:<mimetype>;base64,<payload>` strings.
"""

import base64
import binascii
import re
from typing import NamedTuple

from ..errors import DataUriError


_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64,(?P<data>.*)$", re.DOTALL)


class DataUri(NamedTuple):
    mime_type: str
    data: bytes


def parse_data_uri(value: str) -> DataUri:
    """
    Split a base64 data URI into MIME type and decoded bytes

    Raises:
        DataUriError: if the string is not a base64 data URI or the payload is empty
    """
    if not value or not isinstance(value, str):
        raise DataUriError("Expected a data URI string")

    match = _DATA_URI_PATTERN.match(value.strip())
    if not match:
        raise DataUriError("Expected format: 'data:<mimetype>;base64,<encoded_data>'")

    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DataUriError(f"Invalid base64 payload: {e}") from e

    if not data:
        raise DataUriError("Data URI payload is empty")

    return DataUri(mime_type=match.group("mime").lower(), data=data)


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI"""
    if not data:
        raise DataUriError("Cannot encode an empty payload")
    if not mime_type or "/" not in mime_type:
        raise DataUriError(f"Invalid MIME type: {mime_type!r}")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def require_mime_prefix(uri: DataUri, prefix: str) -> DataUri:
    """Reject payloads whose MIME type is not under `prefix` (e.g. 'image/')"""
    if not uri.mime_type.startswith(prefix):
        raise DataUriError(f"Expected a {prefix.rstrip('/')} payload, got {uri.mime_type}")
    return uri
