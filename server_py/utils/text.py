"""Text parsing utilities for model output and project config files."""
import json
import re
from typing import Any

_CODE_FENCE_PATTERN = re.compile(r"```(?:typescript|ts)?\n([\s\S]*?)\n```")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def extract_code_block(text: str) -> str:
    """Return the first ```typescript / ```ts / untagged fenced block, or the text itself."""
    match = _CODE_FENCE_PATTERN.search(text)
    if match:
        return match.group(1)
    return text


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def _remove_trailing_commas(text: str) -> str:
    """Remove trailing commas before closing brackets/braces in JSON.

    Handles cases like:
    - [1, 2, 3,] -> [1, 2, 3]
    - {"key": "value",} -> {"key": "value"}
    """
    return re.sub(r',(\s*[}\]])', r'\1', text)


def _strip_json_comments(text: str) -> str:
    """Drop // and /* */ comments that sit outside of string literals."""
    result = []
    i = 0
    in_string = False
    length = len(text)

    while i < length:
        char = text[i]

        if in_string:
            result.append(char)
            if char == '\\' and i + 1 < length:
                result.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            result.append(char)
            i += 1
        elif text.startswith('//', i):
            newline = text.find('\n', i)
            i = length if newline == -1 else newline
        elif text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = length if end == -1 else end + 2
        else:
            result.append(char)
            i += 1

    return ''.join(result)


def parse_jsonc(text: str) -> Any:
    """Parse JSON that may carry comments and trailing commas (tsconfig style).

    Raises:
        ValueError: if the cleaned text is still not valid JSON
    """
    cleaned = _remove_trailing_commas(_strip_json_comments(text))
    if not cleaned.strip():
        return {}
    return json.loads(cleaned)
