"""Tag grouping for the drf-spectacular schema.

Every operation is filed under exactly one feature section so Swagger UI
stays partitioned by resource.
"""

from __future__ import annotations

from typing import Any

# Method names that contain operations in the OpenAPI path item
_HTTP_METHODS = {"get", "post", "put", "patch", "delete", "options", "head"}

# First match wins, so more specific prefixes come first.
PATTERN_TAGS = [
    ("/api/auth/jwt/", "JWT Authentication"),
    ("/api/auth/", "Authentication"),
    ("/api/tickets", "Tickets"),
    ("/api/messages", "Messages"),
    ("/api/users", "Users"),
    ("/api/schema", "Meta"),
]

ALL_TAGS = list(dict.fromkeys(tag for _, tag in PATTERN_TAGS))


def assign_group_tag(path: str) -> str | None:
    for prefix, tag in PATTERN_TAGS:
        if path.startswith(prefix):
            return tag
    return None


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    """Post-processing hook: overwrite each operation's tags with its group."""
    for path, path_item in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if not tag:
            continue
        for method, operation in path_item.items():
            if method.lower() not in _HTTP_METHODS or not isinstance(operation, dict):
                continue
            operation["tags"] = [tag]

    existing = {t.get("name") for t in result.get("tags", [])}
    tag_list = result.setdefault("tags", [])
    for tag in ALL_TAGS:
        if tag not in existing:
            tag_list.append({"name": tag})
    return result
