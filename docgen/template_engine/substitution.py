"""Placeholder substitution for {{name}} tokens."""

import re
from collections.abc import Mapping

_TOKEN_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def substitute(body_text: str, values: Mapping[str, str | None]) -> str:
    """Replace {{ key }} tokens with values, matching keys case-insensitively.

    Tokens whose name has no key in ``values`` are left as-is so a missing
    mapping shows up in the output. A key mapped to None becomes "".

    Args:
        body_text: Template text containing placeholder tokens.
        values: Mapping of placeholder name to replacement value.

    Returns:
        The substituted text. Inputs are not modified.
    """
    result = body_text
    for key, value in values.items():
        pattern = re.compile(r"\{\{\s*" + re.escape(str(key)) + r"\s*\}\}", re.IGNORECASE)
        replacement = "" if value is None else str(value)
        result = pattern.sub(lambda _match: replacement, result)
    return result


def find_placeholders(body_text: str) -> list[str]:
    """Return placeholder names in order of first appearance, without duplicates."""
    seen: dict[str, str] = {}
    for match in _TOKEN_PATTERN.finditer(body_text):
        name = match.group(1).strip()
        seen.setdefault(name.lower(), name)
    return list(seen.values())
