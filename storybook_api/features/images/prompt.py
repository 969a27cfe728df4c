# storybook_api/features/images/prompt.py
import re
from typing import Optional

FALLBACK_SUMMARY = "A scene from the story"
ELLIPSIS = "..."
MAX_SUMMARY_WORDS = 15

STYLE_PREAMBLE = "Children's storybook illustration, whimsical and bright style."

_MARKUP_RE = re.compile(r"[*_`]")
_WS_RE = re.compile(r"\s+")


def summarize(text: Optional[str], max_length: int = 50) -> str:
    """
    Short scene summary for an image prompt.

    Takes roughly ``max_length // 5`` words (at most 15). If those words are
    longer than ``max_length`` the result is cut to ``max_length - 3`` chars
    plus "..."; if they fit but words were dropped, "..." is appended anyway,
    so the result can run up to three characters past ``max_length``.
    """
    if not text:
        return FALLBACK_SUMMARY

    cleaned = _WS_RE.sub(" ", _MARKUP_RE.sub("", text)).strip()
    words = cleaned.split(" ")
    max_words = min(MAX_SUMMARY_WORDS, max_length // 5)

    summary = " ".join(words[:max_words])
    if len(summary) > max_length:
        summary = summary[: max(max_length - 3, 0)] + ELLIPSIS
    elif len(words) > max_words:
        summary += ELLIPSIS

    if not summary:
        return FALLBACK_SUMMARY
    return summary


def build_prompt(summary: str) -> str:
    return f"{STYLE_PREAMBLE} Scene showing: {summary}"
