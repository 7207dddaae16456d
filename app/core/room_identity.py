"""
Chat room identity.

A room between two users is addressed by a key derived from the unordered
pair of their identifiers, so both participants resolve the same room.
"""

import re
from app.core.exceptions import InvalidIdentifier

ROOM_KEY_SEPARATOR = "_"

# The separator must never be a legal identifier character.
_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9-]+$")


def validate_identifier(value, field: str = "id") -> str:
    """Return the identifier unchanged or raise InvalidIdentifier"""
    if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
        raise InvalidIdentifier(f"Invalid {field}: {value!r}")
    return value


def room_key(id_a: str, id_b: str) -> str:
    return ROOM_KEY_SEPARATOR.join(sorted([id_a, id_b]))

