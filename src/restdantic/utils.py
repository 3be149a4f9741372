from __future__ import annotations

import re
from typing import Any

CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def underscore(value: Any) -> str:
    """Convert a CamelCase name into its snake_case identifier."""
    text = str(value).strip()
    return CAMEL_BOUNDARY.sub("_", text).lower()
