"""Identifier generation for registry records.

Client identifiers are opaque UUID4 strings; client codes are the short
human-facing codes printed on intake sheets.
"""

import re
import secrets
import uuid

__all__ = [
    "CLIENT_CODE_PREFIX",
    "generate_client_id",
    "generate_client_code",
    "generate_encounter_id",
    "validate_client_code",
]

CLIENT_CODE_PREFIX = "CL"

_CLIENT_CODE_RE = re.compile(rf"^{CLIENT_CODE_PREFIX}-[0-9A-F]{{6}}$")


def generate_client_id() -> str:
    """Generate an opaque client identifier.

    Returns
    -------
    str
        UUID4 string.
    """
    return str(uuid.uuid4())


def generate_encounter_id() -> str:
    """Generate an encounter identifier (UUID4 string)."""
    return str(uuid.uuid4())


def generate_client_code() -> str:
    """Generate a human-facing client code.

    Returns
    -------
    str
        Code in format "CL-XXXXXX" (six uppercase hex digits).

    Notes
    -----
    Codes are random, not sequential; stores retry on the rare collision.
    """
    return f"{CLIENT_CODE_PREFIX}-{secrets.token_hex(3).upper()}"


def validate_client_code(code: str) -> bool:
    """Check that a client code has the generated format.

    Parameters
    ----------
    code : str
        Client code to validate.

    Returns
    -------
    bool
        True if code matches "CL-XXXXXX".
    """
    return bool(_CLIENT_CODE_RE.match(code))
