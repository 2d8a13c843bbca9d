"""Shared constants: header names, metadata keys and business codes."""

from __future__ import annotations

# ── Headers ──────────────────────────────────────────────────────────

HEADER_REQUEST_ID = "X-Request-Id"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CALLER_ID = "X-Caller-Id"
HEADER_SIGNATURE = "X-Signature"

CONTENT_TYPE_JSON = "application/json"

# ── Metadata keys ────────────────────────────────────────────────────

METADATA_BUSINESS_CODE = "business_code"
METADATA_HTTP_CODE = "http_code"
METADATA_NESTED_HEAD = "nested_head"

# ── Business codes ───────────────────────────────────────────────────

BUSINESS_CODE_SUCCESS = "0"
BUSINESS_CODE_FAIL = "1"
BUSINESS_MESSAGE_SUCCESS = "success"

#: Response bodies longer than this are truncated in log lines.
RESPONSE_BODY_LOG_MAX_LEN = 512

#: Request id reported when none can be derived.
UNKNOWN_REQUEST_ID = "unknown"
