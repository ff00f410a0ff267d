"""
Security Constants

Centralized constants for security module.
"""

import re

# Characters allowed in filenames written to ephemeral storage
SAFE_FILENAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]")

# Form field names accepted by the upload endpoint
REQUIRED_FORM_FIELDS = ("category", "language", "monetization")

# Request ID header
REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied request IDs longer than 64 chars or with other characters are replaced
REQUEST_ID_PATTERN = re.compile(r"[a-zA-Z0-9_-]{1,64}")

# Token endpoint fields never written to logs
OAUTH_CREDENTIAL_FIELDS = frozenset({
    "access_token",
    "refresh_token",
    "id_token",
    "client_secret",
})
REDACTED = "[REDACTED]"
