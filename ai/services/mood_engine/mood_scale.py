from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

from .models import (
    EMOTION_TABLE,
    MOOD_LABEL_PREFIX,
    MOOD_SCORE_PREFIX,
    Emotion,
    MoodLabelTag,
    MoodScoreTag,
    MoodTag,
)
from .normalize import fold_diacritics

# Labels as chosen at entry-creation time -> valence on the -2..+2 scale.
LABEL_SCORES: Mapping[str, float] = MappingProxyType({
    "glücklich": 2.0,
    "ruhig": 1.0,
    "neutral": 0.0,
    "traurig": -1.0,
    "gestresst": -1.0,
    "wütend": -2.0,
})
_FOLDED_LABEL_SCORES = {fold_diacritics(k): v for k, v in LABEL_SCORES.items()}

# Shown in timelines for entries that only carry a numeric score.
SCORE_DISPLAY_LABELS: Tuple[str, ...] = ("Sehr schlecht", "Eher schlecht", "Neutral", "Eher gut", "Sehr gut")


def emotion_to_label(e: Emotion) -> str:
    return EMOTION_TABLE[e].label


def emotion_to_score(e: Emotion) -> int:
    return EMOTION_TABLE[e].score


def emotion_for_label(label: str) -> Optional[Emotion]:
    """First emotion carrying this journal label (table order), or None."""
    key = (label or "").strip().lower()
    for e, p in EMOTION_TABLE.items():
        if p.label.lower() == key:
            return e
    return None


def label_to_score(label: str) -> Optional[float]:
    key = (label or "").strip().lower()
    if key in LABEL_SCORES:
        return LABEL_SCORES[key]
    return _FOLDED_LABEL_SCORES.get(fold_diacritics(key))


def _clamp_score(n: int) -> int:
    return max(0, min(4, n))


def score_tag_to_score(n: int) -> float:
    """0..4 -> -2..+2 (out-of-range input is clamped first)."""
    return float(_clamp_score(int(n)) - 2)


def score_to_display_label(n: int) -> str:
    return SCORE_DISPLAY_LABELS[_clamp_score(int(n))]


def format_label_tag(label: str) -> str:
    return MoodLabelTag(label.strip()).encode()


def format_score_tag(score: int) -> str:
    return MoodScoreTag(_clamp_score(int(score))).encode()


def mood_tags_for(e: Emotion) -> Tuple[str, str]:
    return (format_label_tag(emotion_to_label(e)), format_score_tag(emotion_to_score(e)))


def parse_mood_tag(tag: str) -> Optional[MoodTag]:
    """Parse one raw tag. Non-mood tags and malformed scores -> None."""
    s = (tag or "").strip()
    if s.startswith(MOOD_SCORE_PREFIX):
        raw = s[len(MOOD_SCORE_PREFIX):].strip()
        try:
            n = int(raw)
        except ValueError:
            return None
        return MoodScoreTag(_clamp_score(n))
    if s.startswith(MOOD_LABEL_PREFIX):
        label = s[len(MOOD_LABEL_PREFIX):].strip()
        return MoodLabelTag(label) if label else None
    return None


def resolve_mood_tag(tags: Iterable[str]) -> Optional[MoodTag]:
    """Pick the mood of an entry.

    A parseable moodScore tag always wins; otherwise the first mood label
    tag whose label is known. Every mood read in the core goes through here.
    """
    parsed = [p for p in (parse_mood_tag(t) for t in (tags or ())) if p is not None]
    for p in parsed:
        if isinstance(p, MoodScoreTag):
            return p
    for p in parsed:
        if isinstance(p, MoodLabelTag) and label_to_score(p.label) is not None:
            return p
    return None


def mood_tag_value(tag: Optional[MoodTag]) -> Optional[float]:
    if isinstance(tag, MoodScoreTag):
        return score_tag_to_score(tag.score)
    if isinstance(tag, MoodLabelTag):
        return label_to_score(tag.label)
    return None


def mood_value_from_tags(tags: Iterable[str]) -> Optional[float]:
    return mood_tag_value(resolve_mood_tag(tags))


def view_mood_label(tags: Iterable[str]) -> str:
    """Mood text for a timeline row, resolved in the same order as the aggregator.

    When the winning score tag has a label tag with the same value next to
    it, the label is shown instead of the generic score text.
    """
    tags = list(tags or ())
    tag = resolve_mood_tag(tags)
    if isinstance(tag, MoodScoreTag):
        value = score_tag_to_score(tag.score)
        for t in tags:
            p = parse_mood_tag(t)
            if isinstance(p, MoodLabelTag) and label_to_score(p.label) == value:
                return p.label
        return score_to_display_label(tag.score)
    if isinstance(tag, MoodLabelTag):
        return tag.label
    # unknown label: still shown as written
    for t in tags:
        p = parse_mood_tag(t)
        if isinstance(p, MoodLabelTag):
            return p.label
    return ""
