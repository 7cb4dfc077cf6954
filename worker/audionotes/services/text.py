from __future__ import annotations

import re
from typing import List

# Function words plus the filler that shows up in live speech ("um", "yeah", ...)
STOP_WORDS = frozenset({
    "i", "me", "my", "myself", "we", "our", "ours", "ourselves", "you", "your", "yours",
    "yourself", "yourselves", "he", "him", "his", "himself", "she", "her", "hers", "herself",
    "it", "its", "itself", "they", "them", "their", "theirs", "themselves", "what", "which",
    "who", "whom", "this", "that", "these", "those", "am", "is", "are", "was", "were", "be",
    "been", "being", "have", "has", "had", "having", "do", "does", "did", "doing", "a", "an",
    "the", "and", "but", "if", "or", "because", "as", "until", "while", "of", "at", "by",
    "for", "with", "about", "against", "between", "into", "through", "during", "before",
    "after", "above", "below", "to", "from", "up", "down", "in", "out", "on", "off", "over",
    "under", "again", "further", "then", "once", "here", "there", "when", "where", "why",
    "how", "all", "each", "few", "more", "most", "other", "some", "such", "no", "nor", "not",
    "only", "own", "same", "so", "than", "too", "very", "s", "t", "can", "will", "just",
    "don", "should", "now", "d", "ll", "m", "o", "re", "ve", "y", "ain", "aren", "couldn",
    "didn", "doesn", "hadn", "hasn", "haven", "isn", "ma", "mightn", "mustn", "needn",
    "shan", "shouldn", "wasn", "weren", "won", "wouldn", "um", "uh", "like", "know", "yeah",
    "okay", "ok", "right", "well", "going", "got", "get", "thing", "things", "way", "would",
    "could", "also", "really", "actually", "basically", "think", "something", "kind",
})

SENTENCE_MIN_CHARS = 10
CLAUSE_MIN_CHARS = 15
CHUNK_MIN_CHARS = 15
FALLBACK_MIN_TEXT_CHARS = 100
MIN_SEGMENTS = 3
DEFAULT_CHUNK_WORDS = 15

_NON_WORD = re.compile(r"[^\w\s]")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")
_COMMA = re.compile(r",\s+")
_CONJUNCTION = re.compile(r"\s+(and|but|so|because|however|therefore|then|also)\s+", re.IGNORECASE)
_CLAUSE_BREAK = "\x1f"


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens with punctuation stripped; single characters are dropped."""
    cleaned = _NON_WORD.sub(" ", (text or "").lower())
    return [tok for tok in cleaned.split() if len(tok) > 1]


def content_words(text: str, *, min_length: int) -> List[str]:
    """Tokens that carry topical meaning.

    ``min_length`` is the shortest token kept. Scoring and similarity use 3,
    note topics use 4.
    """
    return [tok for tok in tokenize(text) if tok not in STOP_WORDS and len(tok) >= min_length]


def word_count(text: str) -> int:
    return len((text or "").split())


def split_sentences(text: str, min_chars: int = 0) -> List[str]:
    parts = (p.strip() for p in _SENTENCE_END.split(text or ""))
    return [p for p in parts if p and len(p) > min_chars]


def _split_clauses(text: str) -> List[str]:
    pieces: List[str] = []
    for part in _COMMA.split(text):
        marked = _CONJUNCTION.sub(lambda m: f"{_CLAUSE_BREAK}{m.group(1)} ", part)
        pieces.extend(marked.split(_CLAUSE_BREAK))
    stripped = (p.strip() for p in pieces)
    return [p for p in stripped if len(p) > CLAUSE_MIN_CHARS]


def _chunk_words(text: str, size: int) -> List[str]:
    words = text.split()
    chunks: List[str] = []
    for start in range(0, len(words), size):
        chunk = " ".join(words[start:start + size])
        if len(chunk) > CHUNK_MIN_CHARS:
            chunks.append(chunk)
    return chunks


def segment(text: str, chunk_words: int = DEFAULT_CHUNK_WORDS) -> List[str]:
    """Split text into sentence-like segments.

    Live transcripts often arrive without punctuation, so there are three
    tiers: sentence punctuation, then commas and conjunctions, then fixed
    windows of ``chunk_words`` words. A later tier only runs when the earlier
    one produced fewer than three segments and the text is long enough.
    """
    text = (text or "").strip()
    if not text:
        return []
    segments = split_sentences(text, min_chars=SENTENCE_MIN_CHARS)
    long_enough = len(text) > FALLBACK_MIN_TEXT_CHARS
    if len(segments) < MIN_SEGMENTS and long_enough:
        segments = _split_clauses(text)
    if len(segments) < MIN_SEGMENTS and long_enough:
        segments = _chunk_words(text, max(1, int(chunk_words)))
    return segments
