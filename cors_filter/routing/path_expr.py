"""
Path expressions for registered routes.

Compiles route path templates into anchored regular expressions whose
final capture group holds the unmatched remainder of the path.
"""

import re
from functools import lru_cache
from typing import Optional

from starlette.convertors import CONVERTOR_TYPES

# {name} or {name:int} / {name:[0-9]+}
PARAM_PATTERN = re.compile(r"\{([^{}:]+)(?::([^{}]+))?\}")

SEGMENT_REGEX = "[^/]+?"
REMAINDER_REGEX = "(/.*)?"


def _param_regex(spec: Optional[str]) -> str:
    """Resolve the regex for a path parameter (convertor name or raw regex)."""
    if not spec:
        return SEGMENT_REGEX
    convertor = CONVERTOR_TYPES.get(spec)
    if convertor is not None:
        return convertor.regex
    return spec


@lru_cache(maxsize=None)
def compile_template(template: str) -> re.Pattern:
    """
    Compile a path template into a matching expression.

    Args:
        template: Path template like "/users/{id}" or "/files/{name:path}"

    Returns:
        Compiled pattern anchored at both ends, with a trailing
        optional remainder group

    Examples:
        >>> compile_template("/users/{id}").pattern
        '^/users/([^/]+?)(/.*)?$'
        >>> compile_template("/").pattern
        '^(/.*)?$'
    """
    template = template.strip().rstrip("/")

    parts = []
    pos = 0
    for match in PARAM_PATTERN.finditer(template):
        parts.append(re.escape(template[pos : match.start()]))
        parts.append(f"({_param_regex(match.group(2))})")
        pos = match.end()
    parts.append(re.escape(template[pos:]))

    return re.compile("^" + "".join(parts) + REMAINDER_REGEX + "$")


def final_match(pattern: re.Pattern, path: str) -> Optional[str]:
    """
    Match a path and return the value of its last capture group.

    Args:
        pattern: Compiled path expression
        path: Path to match

    Returns:
        None if the path does not match. Otherwise the last group's value
        ("" when that group did not participate), or the whole match when
        the pattern has no groups.
    """
    match = pattern.match(path)
    if match is None:
        return None

    if not pattern.groups:
        return match.group(0)
    return match.group(pattern.groups) or ""
