"""Decoding of tool-call arguments reassembled from a token stream.

The completion API occasionally streams the same argument object twice
(``{"a": 1}{"a": 1}``). :func:`decode_arguments` recovers from that by
decoding only the first balanced object. When two *different* objects
are concatenated the first one still wins; this is a heuristic, not a
repair.
"""

import json
import logging

from callflow.exceptions import MalformedArguments

logger = logging.getLogger(__name__)


def extract_first_object(buffer: str) -> str | None:
    """Return the first balanced ``{...}`` span in *buffer*, or ``None``.

    Braces inside JSON string literals are ignored.
    """
    start = buffer.find("{")
    if start == -1:
        return None
    depth = 0
    in_string = False
    escaped = False
    for pos in range(start, len(buffer)):
        ch = buffer[pos]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return buffer[start:pos + 1]
    return None


def decode_arguments(buffer: str) -> dict:
    """Decode an accumulated argument buffer into a dict.

    Args:
        buffer: Concatenation of every argument fragment streamed for
            one tool call.

    Returns:
        The decoded argument object. An empty buffer decodes to ``{}``.

    Raises:
        MalformedArguments: If no JSON object can be recovered.
    """
    if not buffer.strip():
        return {}
    try:
        parsed = json.loads(buffer)
    except json.JSONDecodeError as e:
        if buffer.count("{") < 2:
            raise MalformedArguments(buffer, str(e)) from e
        logger.warning(f"Duplicate tool arguments in stream: {buffer}")
        candidate = extract_first_object(buffer)
        if candidate is None:
            raise MalformedArguments(buffer, "no balanced object") from e
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as inner:
            raise MalformedArguments(buffer, str(inner)) from inner
    if not isinstance(parsed, dict):
        raise MalformedArguments(buffer, "arguments are not a JSON object")
    return parsed
