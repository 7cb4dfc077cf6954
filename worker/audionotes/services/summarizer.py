"""Extractive summarization of transcript text.

Segments are scored with TF-IDF (segments act as documents), weighted by
position and by keyword categories, and the best ones are returned in
document order. Everything here is a pure function of its input so it can run
concurrently for any number of sessions.
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from . import text as text_svc
from .keywords import DEFAULT_TABLE, KeywordTable, load_keyword_table

SCORING_MIN_TOKEN_LENGTH = 3
KEYWORD_BONUS = 0.3
FIRST_SEGMENT_WEIGHT = 1.5
LAST_SEGMENT_WEIGHT = 1.2
EARLY_SEGMENT_WEIGHT = 1.1
EARLY_FRACTION = 0.2
MIN_KEY_POINTS = 3

_TERMINAL = re.compile(r"[.!?]$")


@dataclass(frozen=True)
class SummaryOptions:
    short_text_words: int = 30
    ratio: float = 0.3
    min_segments: int = 2
    max_segments: int = 5
    key_point_limit: int = 5
    action_item_limit: int = 5
    chunk_words: int = text_svc.DEFAULT_CHUNK_WORDS
    keywords: KeywordTable = DEFAULT_TABLE

    @classmethod
    def from_settings(cls, settings: Any) -> "SummaryOptions":
        return cls(
            short_text_words=int(settings.short_text_words),
            ratio=float(settings.summary_ratio),
            min_segments=int(settings.summary_min_segments),
            max_segments=int(settings.summary_max_segments),
            key_point_limit=int(settings.key_point_limit),
            action_item_limit=int(settings.action_item_limit),
            chunk_words=int(settings.chunk_words),
            keywords=load_keyword_table(settings.keywords_path),
        )


@dataclass(frozen=True)
class Segment:
    index: int
    text: str
    words: FrozenSet[str]
    score: float = 0.0
    is_action: bool = False


@dataclass(frozen=True)
class SummaryResult:
    key_points: Tuple[str, ...] = ()
    action_items: Tuple[str, ...] = ()
    summary: str = ""
    word_count: int = 0
    sentence_count: int = 0
    compression_ratio: float = 0.0

    @classmethod
    def empty(cls) -> "SummaryResult":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key_points": list(self.key_points),
            "action_items": list(self.action_items),
            "summary": self.summary,
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "compression_ratio": self.compression_ratio,
        }


def target_segment_count(segment_count: int, options: SummaryOptions = SummaryOptions()) -> int:
    """How many segments go into the summary: ~30% of the text, clamped to [2, 5]."""
    wanted = max(options.min_segments, math.ceil(segment_count * options.ratio))
    return min(wanted, options.max_segments)


def tfidf_scores(segments: Sequence[str]) -> List[float]:
    """Per-segment sum of tf * idf over its content words, length normalised.

    tf is normalised by the segment's most frequent content word and idf is
    log(N / df) with the segments as documents.
    """
    words_per_segment = [text_svc.content_words(s, min_length=SCORING_MIN_TOKEN_LENGTH) for s in segments]
    doc_freq: Counter[str] = Counter()
    for words in words_per_segment:
        doc_freq.update(set(words))
    total = len(segments)
    scores: List[float] = []
    for words in words_per_segment:
        freq = Counter(words)
        top = max(freq.values(), default=1)
        score = 0.0
        for word in words:
            tf = freq[word] / top
            idf = math.log(total / doc_freq[word])
            score += tf * idf
        scores.append(score / math.sqrt(len(words) or 1))
    return scores


def position_weight(index: int, total: int) -> float:
    if index == 0:
        return FIRST_SEGMENT_WEIGHT
    if index == total - 1:
        return LAST_SEGMENT_WEIGHT
    if index < total * EARLY_FRACTION:
        return EARLY_SEGMENT_WEIGHT
    return 1.0


def keyword_weight(segment: str, keywords: KeywordTable = DEFAULT_TABLE) -> float:
    return 1.0 + KEYWORD_BONUS * len(keywords.matched_categories(segment))


def score_segments(segments: Sequence[str], options: SummaryOptions = SummaryOptions()) -> List[Segment]:
    weights = tfidf_scores(segments)
    total = len(segments)
    scored: List[Segment] = []
    for idx, seg in enumerate(segments):
        score = weights[idx] * position_weight(idx, total) * keyword_weight(seg, options.keywords)
        scored.append(
            Segment(
                index=idx,
                text=seg,
                words=frozenset(text_svc.content_words(seg, min_length=SCORING_MIN_TOKEN_LENGTH)),
                score=score,
                is_action=options.keywords.is_action(seg),
            )
        )
    return scored


def _as_sentence(segment: str) -> str:
    segment = segment.strip()
    if not segment or _TERMINAL.search(segment):
        return segment
    return segment + "."


def _short_text_result(clean: str, words: int, options: SummaryOptions) -> SummaryResult:
    sentences = text_svc.split_sentences(clean)
    actions = [s for s in sentences if options.keywords.is_action(s)]
    return SummaryResult(
        key_points=(clean,),
        action_items=tuple(actions[: options.action_item_limit]),
        summary=clean,
        word_count=words,
        sentence_count=max(1, len(sentences)),
        compression_ratio=1.0,
    )


def _summarize(text: str, options: SummaryOptions) -> SummaryResult:
    clean = (text or "").strip()
    if not clean:
        return SummaryResult.empty()
    words = text_svc.word_count(clean)
    if words < options.short_text_words:
        return _short_text_result(clean, words, options)

    segments = text_svc.segment(clean, chunk_words=options.chunk_words) or [clean]
    scored = score_segments(segments, options)
    # sorted() is stable: equal scores keep document order
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)

    target = target_segment_count(len(segments), options)
    selected = sorted(ranked[:target], key=lambda s: s.index)
    selected_idx = {s.index for s in selected}
    summary = " ".join(_as_sentence(s.text) for s in selected)

    key_points = [s.text for s in ranked if s.index not in selected_idx][: options.key_point_limit]
    if len(key_points) < MIN_KEY_POINTS:
        for s in selected:
            if len(key_points) >= options.key_point_limit:
                break
            if s.text not in key_points:
                key_points.append(s.text)

    action_items = [s.text for s in scored if s.is_action][: options.action_item_limit]

    ratio = text_svc.word_count(summary) / words if words else 0.0
    return SummaryResult(
        key_points=tuple(key_points),
        action_items=tuple(action_items),
        summary=summary,
        word_count=words,
        sentence_count=len(segments),
        compression_ratio=round(ratio, 3),
    )


def summarize(text: str, options: Optional[SummaryOptions] = None) -> SummaryResult:
    """Summarize ``text`` into key points, action items and a short synopsis.

    Never raises: analytics are best-effort, so an unexpected failure is
    logged and an empty result is returned.
    """
    opts = options or SummaryOptions()
    try:
        return _summarize(text, opts)
    except Exception:
        logging.getLogger("app.analytics").exception("summarize failed")
        return SummaryResult.empty()


# --------------------------- Markdown rendering ---------------------------
def _bullet_norm_key(text: str) -> str:
    text = text.strip().casefold()
    if not text:
        return ""
    return re.sub(r"[\W_]+", " ", text).strip()


def _ensure_leading_capital(text: str) -> str:
    if not text:
        return text
    chars = list(text)
    for idx, ch in enumerate(chars):
        if ch.isalpha():
            chars[idx] = ch.upper()
            return "".join(chars)
    return text


def render_summary_markdown(result: SummaryResult) -> str:
    """Render a summary as markdown notes.

    Bullets repeating an earlier bullet (after normalisation) are dropped, so
    a sentence that is both a key point and an action item is listed once.
    """
    lines: List[str] = []
    if result.summary:
        lines.append("## Summary")
        lines.append(result.summary)
        lines.append("")
    used_norms: Set[str] = set()

    def append_section(title: str, entries: Sequence[str], prefix: str = "- ") -> None:
        section_lines: List[str] = []
        for entry in entries:
            norm = _bullet_norm_key(entry)
            if not norm or norm in used_norms:
                continue
            used_norms.add(norm)
            section_lines.append(f"{prefix}{_ensure_leading_capital(entry.strip())}")
        if section_lines:
            lines.append(title)
            lines.extend(section_lines)
            lines.append("")

    append_section("## Key Points", result.key_points)
    append_section("## Action Items", result.action_items, prefix="- [ ] ")
    return "\n".join(lines).strip()
