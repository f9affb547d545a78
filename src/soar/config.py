"""Local configuration for soar."""

from __future__ import annotations

import os


DEFAULT_SCOPE_LENGTH = 6
DEFAULT_SCOPE_ATTRIBUTE = "scope"
DEFAULT_MINIFY_CSS = "true"
DEFAULT_HTML_PARSER = "lxml"

# Initial skeleton every rendered document starts from; html/head/body are
# looked up rather than created when a tree names them.
DOCUMENT_SKELETON = "<!DOCTYPE html><html><head></head><body></body></html>"

SOAR_SCOPE_LENGTH = int(os.getenv("SOAR_SCOPE_LENGTH", str(DEFAULT_SCOPE_LENGTH)))
SOAR_SCOPE_ATTRIBUTE = os.getenv("SOAR_SCOPE_ATTRIBUTE", DEFAULT_SCOPE_ATTRIBUTE)
SOAR_MINIFY_CSS = os.getenv("SOAR_MINIFY_CSS", DEFAULT_MINIFY_CSS).lower() == "true"
SOAR_HTML_PARSER = os.getenv("SOAR_HTML_PARSER", DEFAULT_HTML_PARSER)
