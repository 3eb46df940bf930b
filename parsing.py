"""Response parsing: free-form model output to typed records.

The discovery, writer and generator agents return prose (grounded web
search does not combine with a response schema), so the fields the
dashboard needs are recovered here with line and regex heuristics.

Every function in this module accepts any string and never raises. When
the text does not have the expected shape, a deterministic default is
used instead, so a malformed or empty response still produces a valid,
minimal record.

Trend extraction has two paths behind one entry point, extract_trends():
    1. Structured: the text is a JSON array of trend objects
       (optionally inside a ```json fence)
    2. Heuristic: one trend per "Topic: description" line
"""

import json
import logging
import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from models.content import ArticleDraft, FaqItem
from models.trend import Competition, GroundingSource, Trend

if TYPE_CHECKING:
    from scoring import PlaceholderScorer

logger = logging.getLogger(__name__)

MAX_TRENDS = 5
MIN_TREND_LINE_CHARS = 11  # Shorter lines are headings, bullets, or noise
DEFAULT_SUMMARY = "Automated summary of the latest trends."
DEFAULT_SOURCE_TITLE = "Source"

_CODE_FENCE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)
_TOPIC_NOISE = re.compile(r"[0-9*.]")
_TITLE_HEADING = re.compile(r"^# (.*)", re.MULTILINE)
_TITLE_PREFIX = re.compile(r"Title: (.*)")
_HEADING = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_FAQ_TITLE = re.compile(r"^(?:FAQs?|Frequently Asked Questions)\b", re.IGNORECASE)
_LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*+])\s+")
_BOLD_LEAD = re.compile(r"^\*\*(.+?)\*\*:?\s*(.*)$")
_QUESTION_PREFIX = re.compile(r"^Q(?:uestion)?\s*\d*\s*[:.]\s*", re.IGNORECASE)
_ANSWER_PREFIX = re.compile(r"^(?:\*\*)?A(?:nswer)?\s*[:.](?:\*\*)?\s*", re.IGNORECASE)


def count_words(text: str | None) -> int:
    """Count whitespace-delimited tokens."""
    return len((text or "").split())


# === Trends ===

def _default_description(category: str) -> str:
    return f"Trending news in {category}"


def _default_topic(category: str) -> str:
    return f"Trending in {category}"


def parse_trend_lines(
    text: str | None,
    category: str,
    scorer: "PlaceholderScorer",
    limit: int = MAX_TRENDS,
) -> list[Trend]:
    """Extract trends from "Topic: description" lines.

    Lines shorter than MIN_TREND_LINE_CHARS (after trimming) are dropped and
    the first `limit` remaining lines become trends. The topic is the text
    before the first colon with digits, asterisks and periods removed; the
    description is the text after it, or the whole line when there is no
    colon.

    Args:
        text: Raw model output
        category: Category used for fallback descriptions
        scorer: Supplies placeholder relevance and competition
        limit: Maximum trends to return

    Returns:
        Up to `limit` trends, possibly empty
    """
    lines = [line for line in (text or "").splitlines() if len(line.strip()) >= MIN_TREND_LINE_CHARS]

    trends = []
    for line in lines[:max(limit, 0)]:
        head, sep, tail = line.partition(":")
        topic = _TOPIC_NOISE.sub("", head).strip()
        description = (tail if sep else line).strip()
        trends.append(Trend(
            topic=topic or _default_topic(category),
            description=description or _default_description(category),
            relevance=scorer.relevance(),
            competition=scorer.competition(),
        ))
    return trends


def _strip_code_fence(text: str) -> str:
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text.strip()


def _load_json(text: str | None) -> Any:
    """Parse JSON from model output, tolerating a markdown fence. None on failure."""
    if not text or not text.strip():
        return None
    try:
        return json.loads(_strip_code_fence(text))
    except (json.JSONDecodeError, ValueError):
        return None


def _coerce_relevance(value: Any, scorer: "PlaceholderScorer") -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 100:
        return int(value)
    return scorer.relevance()


def _coerce_competition(value: Any, scorer: "PlaceholderScorer") -> Competition:
    raw = str(value or "").strip().lower()
    for competition in Competition:
        if raw == competition.value.lower():
            return competition
    return scorer.competition()


def coerce_trends(
    items: Iterable[Any],
    category: str,
    scorer: "PlaceholderScorer",
    limit: int = MAX_TRENDS,
) -> list[Trend]:
    """Build trends from already-structured items (decoded JSON objects).

    Items that are not objects or carry no topic are skipped. Missing or
    out-of-range relevance and unknown competition values fall back to the
    placeholder scorer.
    """
    trends: list[Trend] = []
    for item in items:
        if len(trends) >= limit:
            break
        if not isinstance(item, Mapping):
            continue
        topic = str(item.get("topic") or "").strip()
        if not topic:
            continue
        description = str(item.get("description") or "").strip()
        volume = item.get("search_volume") or item.get("searchVolume")
        trends.append(Trend(
            topic=topic,
            description=description or _default_description(category),
            relevance=_coerce_relevance(item.get("relevance"), scorer),
            competition=_coerce_competition(item.get("competition"), scorer),
            search_volume=str(volume).strip() if volume else None,
        ))
    return trends


def extract_trends(
    text: str | None,
    category: str,
    scorer: "PlaceholderScorer",
    limit: int = MAX_TRENDS,
) -> list[Trend]:
    """Extract up to `limit` trends from discovery output.

    Uses the structured path when the text decodes to a JSON array (or an
    object with a "trends" array) and falls back to the line heuristic
    otherwise.
    """
    data = _load_json(text)
    if isinstance(data, Mapping):
        data = data.get("trends")
    if isinstance(data, list):
        trends = coerce_trends(data, category, scorer, limit=limit)
        logger.debug("Trends parsed from JSON | items=%d trends=%d", len(data), len(trends))
        return trends

    trends = parse_trend_lines(text, category, scorer, limit=limit)
    logger.debug("Trends parsed from lines | trends=%d", len(trends))
    return trends


# === Article ===

def _clean_inline(text: str) -> str:
    return text.strip().strip("*_").strip()


def extract_title(text: str | None, topic: str) -> str:
    """Return the first "# " heading or "Title: " line, else a default title."""
    text = text or ""
    match = _TITLE_HEADING.search(text) or _TITLE_PREFIX.search(text)
    title = _clean_inline(match.group(1)) if match else ""
    return title or f"Deep Dive: {topic}"


def extract_summary(text: str | None, max_chars: int | None = None) -> str:
    """Return the second blank-line-separated block of the text.

    Args:
        text: Full article text
        max_chars: When set, truncate at a word boundary and append "..."

    Returns:
        Summary text or DEFAULT_SUMMARY
    """
    blocks = (text or "").replace("\r\n", "\n").split("\n\n")
    summary = blocks[1].strip() if len(blocks) > 1 else ""
    if not summary:
        return DEFAULT_SUMMARY
    if max_chars and len(summary) > max_chars:
        cut = summary[:max_chars]
        if " " in cut:
            cut = cut.rsplit(" ", 1)[0]
        summary = cut.rstrip(" ,;:.-") + "..."
    return summary


def _heading(line: str) -> tuple[int, str] | None:
    match = _HEADING.match(line.strip())
    if not match:
        return None
    return len(match.group(1)), match.group(2)


def _question_from_line(line: str) -> tuple[str, str] | None:
    """Return (question, inline answer) if the line opens an FAQ entry."""
    heading = _heading(line)
    if heading:
        return _QUESTION_PREFIX.sub("", _clean_inline(heading[1])), ""

    stripped = _LIST_MARKER.sub("", line.strip())
    bold = _BOLD_LEAD.match(stripped)
    if bold:
        question = _QUESTION_PREFIX.sub("", _clean_inline(bold.group(1)))
        rest = bold.group(2).strip()
        if not rest or question.endswith("?"):
            return question, _ANSWER_PREFIX.sub("", rest)
        return None

    if _QUESTION_PREFIX.match(stripped):
        return _clean_inline(_QUESTION_PREFIX.sub("", stripped)), ""
    return None


def extract_faq(text: str | None) -> list[FaqItem]:
    """Extract question/answer pairs from the article's FAQ section.

    The section starts at a heading named "FAQ", "FAQs" or "Frequently
    Asked Questions" and ends at the next heading of the same or higher
    level. Questions are sub-headings, bold lines, or "Q:" lines; the
    lines that follow form the answer.

    Returns:
        FAQ items in document order, or [] when there is no FAQ section
    """
    lines = (text or "").splitlines()

    start = None
    level = 0
    for i, line in enumerate(lines):
        heading = _heading(line)
        if heading and _FAQ_TITLE.match(_clean_inline(heading[1])):
            start, level = i + 1, heading[0]
            break
    if start is None:
        return []

    items: list[FaqItem] = []
    question: str | None = None
    answer: list[str] = []

    def flush() -> None:
        if question:
            items.append(FaqItem(question=question, answer=" ".join(answer).strip()))

    for line in lines[start:]:
        heading = _heading(line)
        if heading and heading[0] <= level:
            break
        if not line.strip():
            continue
        opened = _question_from_line(line)
        if opened:
            flush()
            question, inline = opened
            answer = [inline] if inline else []
        elif question:
            answer.append(_ANSWER_PREFIX.sub("", line.strip()))
    flush()
    return items


def parse_article(text: str | None, topic: str, summary_max_chars: int | None = None) -> ArticleDraft:
    """Recover title, summary and body from writer/generator output."""
    content = text or ""
    return ArticleDraft(
        title=extract_title(content, topic),
        summary=extract_summary(content, max_chars=summary_max_chars),
        content=content,
    )


# === Grounding ===

def _web_entry(chunk: Any) -> Mapping[str, Any] | None:
    """Return the web citation inside a grounding chunk, if there is one.

    Accepts the {"web": {...}} shape, an already-flat {"title", "uri"}
    mapping, or a google-genai GroundingChunk object.
    """
    if isinstance(chunk, Mapping):
        if "web" in chunk:
            web = chunk["web"]
            return web if isinstance(web, Mapping) else None
        return chunk if "uri" in chunk else None
    web = getattr(chunk, "web", None)
    if web is None:
        return None
    return {"title": getattr(web, "title", None), "uri": getattr(web, "uri", None)}


def extract_grounding_sources(chunks: Iterable[Any] | None) -> list[GroundingSource]:
    """Map retrieval metadata to citations.

    Entries without a web resource or a uri are dropped, missing titles
    become "Source", and repeated uris are kept once (first occurrence).
    """
    sources: list[GroundingSource] = []
    seen: set[str] = set()
    for chunk in chunks or ():
        web = _web_entry(chunk)
        if not web:
            continue
        uri = str(web.get("uri") or "").strip()
        if not uri or uri in seen:
            continue
        seen.add(uri)
        title = str(web.get("title") or "").strip() or DEFAULT_SOURCE_TITLE
        sources.append(GroundingSource(title=title, uri=uri))
    return sources
