"""Common literal values used across pagechain.

These constants keep default patterns, metadata keys, and token formats
centralized so the renderer, navigation builder, and tests import the same
values without drifting. Intended for internal use within the package.

Examples
--------
>>> from pagechain import _constants
>>> bool(_constants.DEFAULT_INDEX_PATTERN.search("index.html"))
True
>>> _constants.FRONT_MATTER_SENTINEL
b'---'
"""

import re

DEFAULT_INDEX_PATTERN = re.compile(r"^index\.\w+")
DEFAULT_PAGE_PATTERN = re.compile(r"\.html?\b")
FRONT_MATTER_SENTINEL = b"---"
RESERVED_META_KEYS = frozenset({"url"})
POST_PROCESS_TOKEN_TEMPLATE = "[[pagechain:post-process:{session}:{index}]]"
POST_PROCESS_TOKEN_PATTERN = re.compile(
    rb"\[\[pagechain:post-process:([0-9a-f]+):(\d+)\]\]"
)
QUIET_EXTENSIONS = frozenset({".html", ".css", ".js"})
