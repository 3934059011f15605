"""
Shared constants for the build client.

This module consolidates wire-level names and defaults used across the
builder, the transport and the result normalizer.
"""

# Endpoints
BUILD_ENDPOINT = "/build"
ANALYZE_BUILD_ENDPOINT = "/analyze_build"
ACCOUNT_INFO_ENDPOINT = "/account/info"

# Asset keys
ASSET_KEY_PREFIX = "asset_"

# Progress reporting
EXECUTE_TOTAL_STEPS = 3

# Output type tags
PDF_OUTPUT_TYPES = ("pdf", "pdfa", "pdfua")
OFFICE_OUTPUT_TYPES = ("docx", "xlsx", "pptx")
TEXT_OUTPUT_TYPES = ("html", "markdown")
JSON_CONTENT_OUTPUT_TYPE = "json-content"

# Mime types
DEFAULT_MIME_TYPE = "application/octet-stream"
DEFAULT_FILENAME = "output"
OFFICE_MIME_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}
