"""
Security module for vidpublish.

Provides:
- Upload form validation
- Filename sanitization
- Request ID tracking
- OAuth payload redaction
"""

from vidpublish.core.security.constants import (
    REQUEST_ID_HEADER,
    REQUIRED_FORM_FIELDS,
    SAFE_FILENAME_PATTERN,
)
from vidpublish.core.security.validation import (
    clean_text,
    is_usable_file,
    resolve_source,
    sanitize_filename,
    validate_upload_form,
)
from vidpublish.core.security.utils import (
    generate_request_id,
    get_request_id,
    redact_token_payload,
)

__all__ = [
    # Constants
    "REQUEST_ID_HEADER",
    "REQUIRED_FORM_FIELDS",
    "SAFE_FILENAME_PATTERN",
    # Validation
    "clean_text",
    "is_usable_file",
    "resolve_source",
    "sanitize_filename",
    "validate_upload_form",
    # Utils
    "generate_request_id",
    "get_request_id",
    "redact_token_payload",
]
