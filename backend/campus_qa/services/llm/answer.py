"""
Answer extraction.

Providers do not agree on a response shape, so the answer text is pulled out
by a short chain of extractors tried in order. Each returns the text or None
to defer to the next; if none matches, a fixed fallback is used.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

ANSWER_FALLBACK = "Xin lỗi, đã xảy ra lỗi khi tạo câu trả lời."

AnswerExtractor = Callable[[Any], str | None]


def extract_raw_text(response: Any) -> str | None:
    return response if isinstance(response, str) else None


def field_extractor(name: str) -> AnswerExtractor:
    """Read `name` as a mapping key or an attribute; only strings count."""

    def extract(response: Any) -> str | None:
        if isinstance(response, Mapping):
            value = response.get(name)
        else:
            value = getattr(response, name, None)
        return value if isinstance(value, str) else None

    extract.__name__ = f"extract_{name}"
    return extract


DEFAULT_EXTRACTORS: tuple[AnswerExtractor, ...] = (
    extract_raw_text,
    field_extractor("content"),
    field_extractor("text"),
)


def extract_answer(
    response: Any,
    extractors: tuple[AnswerExtractor, ...] = DEFAULT_EXTRACTORS,
) -> str:
    for extractor in extractors:
        answer = extractor(response)
        if answer is not None:
            return answer

    logger.warning(
        "Unexpected generation response shape (%s): %r",
        type(response).__name__,
        response,
    )
    return ANSWER_FALLBACK
