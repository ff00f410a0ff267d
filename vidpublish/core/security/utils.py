"""
Security Utilities

Request ID tracking and redaction of OAuth credentials before logging.
"""

import secrets
from typing import Any, Dict, Mapping

from fastapi import Request

from vidpublish.core.security.constants import (
    OAUTH_CREDENTIAL_FIELDS,
    REDACTED,
    REQUEST_ID_HEADER,
    REQUEST_ID_PATTERN,
)


def generate_request_id() -> str:
    return secrets.token_hex(16)


def get_request_id(request: Request) -> str:
    """Reuse a well-formed client-supplied request ID, otherwise mint one."""
    request_id = request.headers.get(REQUEST_ID_HEADER, "")
    if REQUEST_ID_PATTERN.fullmatch(request_id):
        return request_id
    return generate_request_id()


def redact_token_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Copy an OAuth token endpoint payload with credential fields redacted.

    Error fields (``error``, ``error_description``) are kept so failed
    refreshes stay diagnosable.
    """
    return {
        key: REDACTED if key.lower() in OAUTH_CREDENTIAL_FIELDS else value
        for key, value in payload.items()
    }
