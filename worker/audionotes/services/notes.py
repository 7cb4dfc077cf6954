from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from . import text as text_svc
from .similarity import containment, is_duplicate, token_set
from .summarizer import SummaryOptions, summarize

TOPIC_MIN_TOKEN_LENGTH = 4
SEGMENT_MIN_CHARS = 20
CONTAINMENT_MIN_TOKENS = 3

_LIST_ITEM = re.compile(r"^(?:[-*]|\d+\.)")


@dataclass(frozen=True)
class EnhanceOptions:
    duplicate_threshold: float = 0.4
    containment_threshold: Optional[float] = None
    topic_limit: int = 20
    related_limit: int = 6
    new_info_limit: int = 5
    key_point_limit: int = 5
    summary: SummaryOptions = field(default_factory=SummaryOptions)

    @classmethod
    def from_settings(cls, settings: Any) -> "EnhanceOptions":
        return cls(
            duplicate_threshold=float(settings.duplicate_threshold),
            containment_threshold=settings.containment_threshold,
            topic_limit=int(settings.topic_limit),
            related_limit=int(settings.related_limit),
            new_info_limit=int(settings.new_info_limit),
            key_point_limit=int(settings.key_point_limit),
            summary=SummaryOptions.from_settings(settings),
        )


@dataclass(frozen=True)
class DocumentSection:
    title: str
    lines: Tuple[str, ...]
    caption: Optional[str] = None


@dataclass(frozen=True)
class EnhancedDocument:
    title: str
    sections: Tuple[DocumentSection, ...]

    @property
    def section_titles(self) -> List[str]:
        return [s.title for s in self.sections]

    def section(self, title: str) -> Optional[DocumentSection]:
        for s in self.sections:
            if s.title == title:
                return s
        return None

    def to_markdown(self) -> str:
        out = [f"# {self.title}", ""]
        for s in self.sections:
            out.append(f"## {s.title}")
            if s.caption:
                out.append(f"_{s.caption}_")
                out.append("")
            out.extend(s.lines)
            out.append("")
        return "\n".join(out)


@dataclass
class _RelatedSegment:
    text: str
    topics: List[str]


def parse_note_lines(existing_notes: str) -> List[str]:
    return [line.strip() for line in (existing_notes or "").splitlines() if line.strip()]


def extract_topics(note_lines: List[str], limit: int = 20) -> List[str]:
    """Most frequent content words of the notes; ties keep first appearance."""
    counts: Counter[str] = Counter()
    for line in note_lines:
        counts.update(text_svc.content_words(line, min_length=TOPIC_MIN_TOKEN_LENGTH))
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [word for word, _ in ranked[:limit]]


def _as_list_item(line: str) -> str:
    if _LIST_ITEM.match(line):
        return line
    return f"- {line}"


def _duplicates_notes(words: FrozenSet[str], note_sets: List[FrozenSet[str]], options: EnhanceOptions) -> bool:
    for note_words in note_sets:
        if is_duplicate(note_words, words, options.duplicate_threshold):
            return True
        if options.containment_threshold is None or len(words) < CONTAINMENT_MIN_TOKENS:
            continue
        if containment(words, note_words) >= options.containment_threshold:
            return True
    return False


def classify_segments(
    segments: List[str],
    note_lines: List[str],
    topics: List[str],
    options: EnhanceOptions,
) -> Tuple[List[_RelatedSegment], List[str]]:
    """Split transcript segments into ones related to the notes and new ones.

    Segments that restate an existing note line are dropped from both.
    """
    topic_set = set(topics)
    note_sets = [token_set(line) for line in note_lines]
    related: List[_RelatedSegment] = []
    new_info: List[str] = []
    for seg in segments:
        if len(seg) <= SEGMENT_MIN_CHARS:
            continue
        words = token_set(seg)
        if _duplicates_notes(words, note_sets, options):
            continue
        matching = sorted(words & topic_set)
        if matching:
            related.append(_RelatedSegment(text=seg, topics=matching))
        else:
            new_info.append(seg)
    related.sort(key=lambda r: len(r.topics), reverse=True)
    return related, new_info


def _build_document(existing_notes: str, transcription: str, options: EnhanceOptions) -> EnhancedDocument:
    note_lines = parse_note_lines(existing_notes)
    topics = extract_topics(note_lines, options.topic_limit)
    segments = text_svc.segment(transcription, chunk_words=options.summary.chunk_words)
    summary = summarize(transcription, options.summary)
    related, new_info = classify_segments(segments, note_lines, topics, options)

    sections: List[DocumentSection] = []
    if note_lines:
        sections.append(DocumentSection("Original Notes", tuple(_as_list_item(l) for l in note_lines)))
    if related:
        sections.append(
            DocumentSection(
                "Expanded Details from Recording",
                tuple(f"- {r.text}" for r in related[: options.related_limit]),
                caption="Information from the recording that relates to your notes:",
            )
        )
    if new_info:
        sections.append(
            DocumentSection(
                "New Information from Recording",
                tuple(f"- {s}" for s in new_info[: options.new_info_limit]),
                caption="Additional topics discussed that weren't in your original notes:",
            )
        )
    if summary.key_points:
        sections.append(
            DocumentSection("Key Points", tuple(f"- {p}" for p in summary.key_points[: options.key_point_limit]))
        )
    if summary.action_items:
        sections.append(DocumentSection("Action Items", tuple(f"- [ ] {a}" for a in summary.action_items)))
    if summary.summary:
        sections.append(DocumentSection("Recording Summary", (summary.summary,)))
    return EnhancedDocument(title="Enhanced Notes", sections=tuple(sections))


def enhance(existing_notes: str, transcription: str, options: Optional[EnhanceOptions] = None) -> EnhancedDocument:
    """Merge a transcription into existing notes.

    The original note lines are kept verbatim and in order; everything
    derived from the transcription is appended as extra sections. On an
    unexpected failure only the original notes are returned.
    """
    opts = options or EnhanceOptions()
    try:
        return _build_document(existing_notes, transcription, opts)
    except Exception:
        logging.getLogger("app.analytics").exception("enhance failed")
        lines = tuple(_as_list_item(l) for l in parse_note_lines(existing_notes))
        sections = (DocumentSection("Original Notes", lines),) if lines else ()
        return EnhancedDocument(title="Enhanced Notes", sections=sections)


def enhance_to_dict(existing_notes: str, transcription: str, options: Optional[EnhanceOptions] = None) -> Dict[str, Any]:
    doc = enhance(existing_notes, transcription, options)
    return {"ok": True, "enhanced_notes": doc.to_markdown(), "sections": doc.section_titles}
