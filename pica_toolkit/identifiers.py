"""Identifier Parser - validated construction of action IDs and connection keys.

Both identifier families are opaque strings with embedded structure:

- action system ID: ``prefix::metadata::suffix``
- connection key:   ``environment::platform::namespace::id[|identity]``

Raw strings are parsed into immutable value types at the edge; nothing
downstream re-splits them.
"""

from .errors import FormatError
from .types import (
    ActionSystemId,
    ActionSystemIdParts,
    ConnectionKey,
    ConnectionKeyParts,
    Environment,
)

CANONICAL_ACTION_PREFIX = "conn_mod_def"
SEPARATOR = "::"
IDENTITY_SEPARATOR = "|"


def normalize_action_id(raw: str) -> str:
    """
    Prepend the canonical prefix to a bare ``metadata::suffix`` pair.

    Strings without ``::`` are returned unchanged so custom or already
    canonical identifiers pass through.
    """
    if SEPARATOR in raw and not raw.startswith(CANONICAL_ACTION_PREFIX + SEPARATOR):
        return f"{CANONICAL_ACTION_PREFIX}{SEPARATOR}{raw}"
    return raw


def parse_action_id(raw: str) -> ActionSystemId:
    """
    Parse an action system ID into its parts.

    Raises:
        FormatError: If the segment count is not three or a segment is empty
    """
    if not raw or not isinstance(raw, str):
        raise FormatError("System ID must be a non-empty string")

    parts = raw.split(SEPARATOR)
    if len(parts) != 3:
        raise FormatError("Invalid system ID format. Expected: prefix::metadata::suffix")

    prefix, metadata, suffix = parts
    for name, value in (("Prefix", prefix), ("Metadata", metadata), ("Suffix", suffix)):
        if not value:
            raise FormatError(f"{name} cannot be empty in system ID")

    return ActionSystemId(
        full_id=raw,
        parts=ActionSystemIdParts(prefix=prefix, metadata=metadata, suffix=suffix),
    )


def parse_connection_key(raw: str) -> ConnectionKey:
    """
    Parse a connection key into its parts.

    Raises:
        FormatError: If the key does not have exactly four segments, the
            environment is not 'live' or 'test', or a segment is empty
    """
    if not raw or not isinstance(raw, str):
        raise FormatError("Connection key must be a non-empty string")

    parts = raw.split(SEPARATOR)
    if len(parts) != 4:
        raise FormatError(
            "Invalid connection key format. "
            "Expected: environment::platform::namespace::id[|identity]"
        )

    environment, platform, namespace, last = parts

    if environment not in (Environment.LIVE.value, Environment.TEST.value):
        raise FormatError(f"Invalid environment '{environment}'. Must be 'live' or 'test'")
    if not platform:
        raise FormatError("Platform cannot be empty in connection key")
    if not namespace:
        raise FormatError("Namespace cannot be empty in connection key")
    if not last:
        raise FormatError("ID cannot be empty in connection key")

    connection_id = last
    identity = None
    if IDENTITY_SEPARATOR in last:
        connection_id, identity = last.split(IDENTITY_SEPARATOR, 1)
        if not connection_id:
            raise FormatError("ID cannot be empty in connection key")
        if not identity:
            raise FormatError("Identity cannot be empty in connection key")

    return ConnectionKey(
        full_key=raw,
        parts=ConnectionKeyParts(
            environment=Environment(environment),
            platform=platform,
            namespace=namespace,
            id=connection_id,
            identity=identity,
        ),
    )
