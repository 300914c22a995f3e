"""
Parse completion-service answers.

Single answers are the translated string itself, possibly wrapped in a
markdown code fence.

Batch answers should be a JSON array, but models like to add prose
around it ("Sure, here you go: [...]"). The first balanced [...] in the
text is taken as the payload. If there is none, or it is not valid
JSON, the whole batch is malformed; there is no partial credit.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from l10n_gpt.errors import EmptyResponseError, MalformedBatchResponse, RemoteServiceError
from l10n_gpt.models import (
    LocalizationKey,
    LocalizationUnit,
    SimpleUnit,
    VariantUnit,
)
from l10n_gpt.translate.registry import KeyAssociationRegistry, sanitize_key

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 500

VALUE_FIELDS = ("string_to_translate", "strings_to_translate")


def response_content(response: Mapping[str, Any]) -> str:
    """Extract the message content from a completion response.

    Raises:
        RemoteServiceError: the response carries an error payload
        EmptyResponseError: there is no content, or only whitespace
    """
    error = response.get("error")
    if error:
        message = error.get("message") if isinstance(error, Mapping) else str(error)
        raise RemoteServiceError(message or "unknown error")

    try:
        content = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None

    if not isinstance(content, str) or not content.strip():
        raise EmptyResponseError("response has no content")
    return content


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` fence if the whole answer is fenced."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        if len(lines) > 1 and lines[-1].strip() == "```":
            lines = lines[1:-1]
        else:
            lines = lines[1:]
        cleaned = "\n".join(lines)
    return cleaned.strip()


def parse_single_response(response: Mapping[str, Any]) -> str:
    """Translated text of a single-string answer."""
    text = strip_code_fence(response_content(response))
    if not text:
        raise EmptyResponseError("response only contains a code fence")
    return text


def _matching_bracket(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def find_json_array(text: str) -> Optional[str]:
    """Return the first balanced top-level [...] substring, if any.

    Brackets inside JSON strings do not count. An opening bracket that is
    never closed is skipped and the search continues after it.
    """
    start = text.find("[")
    while start != -1:
        end = _matching_bracket(text, start)
        if end is not None:
            return text[start:end + 1]
        start = text.find("[", start + 1)
    return None


@dataclass
class BatchTranslation:
    """Parsed content of one batch answer.

    Attributes:
        translations: Translated units by original key, in answer order
        empty: Keys the model answered with an empty value
        consumed: Tokens that resolved to a key of the batch
        dropped: Elements ignored (bad shape, unknown or empty key)
    """
    translations: dict[LocalizationKey, LocalizationUnit] = field(default_factory=dict)
    empty: list[LocalizationKey] = field(default_factory=list)
    consumed: set[str] = field(default_factory=set)
    dropped: int = 0

    def answered(self, key: LocalizationKey) -> bool:
        return key in self.translations or key in self.empty


def _element_value(element: Mapping[str, Any]) -> Any:
    for name in VALUE_FIELDS:
        if name in element:
            return element[name]
    # Models sometimes rename the field; take whatever single value is left
    return next(iter(element.values()), None)


def _build_unit(
    value: Any,
    source: Optional[LocalizationUnit],
) -> Optional[LocalizationUnit]:
    """Turn an answer value into a unit shaped like its source.

    Returns None for a value whose shape does not match the source kind.
    """
    comment = source.comment if source is not None else None

    if isinstance(value, Mapping):
        if isinstance(source, SimpleUnit):
            return None
        forms = {}
        for tag, text in value.items():
            if isinstance(text, (Mapping, list)):
                logger.warning(f"Dropping plural form {tag!r}: expected text, got {text!r}")
                continue
            if text is not None and str(text) != "":
                forms[str(tag)] = SimpleUnit(str(text), comment)
        return VariantUnit(forms=forms, comment=comment)

    if isinstance(source, VariantUnit):
        return None
    if value is None or isinstance(value, (list, bool)):
        return SimpleUnit("", comment)
    return SimpleUnit(str(value), comment)


def parse_batch_response(
    content: str,
    registry: KeyAssociationRegistry,
    sources: Mapping[LocalizationKey, LocalizationUnit],
) -> BatchTranslation:
    """Parse a batch answer and map its tokens back to keys.

    Args:
        content: Raw answer text
        registry: Token -> key mapping of the current batch
        sources: Source units of the batch, for comments and unit kinds

    Raises:
        MalformedBatchResponse: no JSON array, or the array is not valid JSON
    """
    payload = find_json_array(content)
    if payload is None:
        raise MalformedBatchResponse(
            "no JSON array in response", snippet=content[:SNIPPET_LENGTH]
        )
    try:
        items = json.loads(payload)
    except ValueError as e:
        raise MalformedBatchResponse(
            f"invalid JSON array: {e}", snippet=payload[:SNIPPET_LENGTH]
        ) from e

    result = BatchTranslation()
    for element in items:
        if not isinstance(element, Mapping):
            result.dropped += 1
            logger.debug(f"Dropping non-object element: {element!r}")
            continue

        element = dict(element)
        token = element.pop("key", None)
        element.pop("context", None)
        key = registry.resolve(token)
        if key is None:
            result.dropped += 1
            logger.debug(f"Dropping element with unknown key {token!r}")
            continue

        result.consumed.add(sanitize_key(str(token)))
        unit = _build_unit(_element_value(element), sources.get(key))
        if unit is None:
            result.dropped += 1
            logger.warning(f"Answer for {key!r} does not match the shape of its source string")
            continue

        if unit.is_empty:
            result.empty.append(key)
        else:
            result.translations[key] = unit

    return result
