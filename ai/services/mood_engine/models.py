from __future__ import annotations

import math
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

MOOD_LABEL_PREFIX = "mood:"
MOOD_SCORE_PREFIX = "moodScore:"

CONFIDENCE_MIN = 0.55
CONFIDENCE_MAX = 0.98
CONFIDENCE_NEUTRAL = 0.66   # empty input / unparsable record
CONFIDENCE_NO_HITS = 0.62


class Emotion(str, Enum):
    JOY = "joy"
    SADNESS = "sadness"
    ANGER = "anger"
    FEAR = "fear"
    CALM = "calm"
    SURPRISE = "surprise"
    NEUTRAL = "neutral"
    COMPASSION = "compassion"

    @classmethod
    def parse(cls, value: Any) -> "Emotion":
        s = str(value or "").strip().lower()
        for e in cls:
            if e.value == s:
                return e
        return cls.NEUTRAL


@dataclass(frozen=True)
class EmotionProfile:
    label: str      # journal mood label (one of MOOD_LABELS)
    score: int      # 0..4
    glyph: str
    color: int      # ARGB
    name_de: str
    name_en: str


# Single source of truth for emotion -> label / score / visuals.
EMOTION_TABLE: Mapping[Emotion, EmotionProfile] = MappingProxyType({
    Emotion.JOY:        EmotionProfile("Glücklich", 4, "😊", 0xFFA5CBA1, "Freude", "Joy"),
    Emotion.CALM:       EmotionProfile("Ruhig", 3, "🌿", 0xFFBEE6CB, "Ruhe", "Calm"),
    Emotion.COMPASSION: EmotionProfile("Ruhig", 3, "🤗", 0xFFE9C8A7, "Mitgefühl", "Compassion"),
    Emotion.NEUTRAL:    EmotionProfile("Neutral", 2, "😐", 0xFFB5B5B5, "Neutral", "Neutral"),
    Emotion.SURPRISE:   EmotionProfile("Neutral", 2, "😲", 0xFFF7CE84, "Überraschung", "Surprise"),
    Emotion.SADNESS:    EmotionProfile("Traurig", 1, "😢", 0xFF95A3B3, "Traurigkeit", "Sadness"),
    Emotion.FEAR:       EmotionProfile("Gestresst", 1, "😨", 0xFFB2B8CB, "Angst", "Fear"),
    Emotion.ANGER:      EmotionProfile("Wütend", 0, "😡", 0xFFD67873, "Wut", "Anger"),
})

MOOD_LABELS: Tuple[str, ...] = ("Glücklich", "Ruhig", "Neutral", "Traurig", "Gestresst", "Wütend")


def _clamp_confidence(v: float) -> float:
    return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, v))


@dataclass(frozen=True)
class DetectedEmotionResult:
    emotion: Emotion
    confidence: float
    reason: Optional[str] = None
    is_crisis: bool = False
    matched_keywords: Tuple[str, ...] = ()

    @property
    def profile(self) -> EmotionProfile:
        return EMOTION_TABLE[self.emotion]

    @property
    def glyph(self) -> str:
        return self.profile.glyph

    @property
    def color(self) -> int:
        return self.profile.color

    @property
    def mood_label(self) -> str:
        return self.profile.label

    @property
    def mood_score(self) -> int:
        return self.profile.score

    def label(self, locale: str = "de") -> str:
        p = self.profile
        return p.name_en if str(locale or "").lower().startswith("en") else p.name_de

    def mood_tags(self) -> Tuple[str, str]:
        """Tags the storage layer attaches to the entry for this result."""
        return (f"{MOOD_LABEL_PREFIX}{self.mood_label}", f"{MOOD_SCORE_PREFIX}{self.mood_score}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emotion": self.emotion.value,
            "confidence": self.confidence,
            "emoji": self.glyph,
            "color": self.color,
            "reason": self.reason,
            "isCrisis": self.is_crisis,
            "matchedKeywords": list(self.matched_keywords),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DetectedEmotionResult":
        # emoji/color are derived from the emotion table and not read back
        try:
            conf = _clamp_confidence(float(d.get("confidence")))
        except (TypeError, ValueError):
            conf = CONFIDENCE_NEUTRAL
        reason = d.get("reason")
        kws = d.get("matchedKeywords") or []
        if not isinstance(kws, (list, tuple)):
            kws = []
        return cls(
            emotion=Emotion.parse(d.get("emotion")),
            confidence=conf,
            reason=str(reason) if reason is not None else None,
            is_crisis=d.get("isCrisis") is True,
            matched_keywords=tuple(str(k) for k in kws),
        )


# ---------- mood tags ----------

@dataclass(frozen=True)
class MoodLabelTag:
    label: str

    def encode(self) -> str:
        return f"{MOOD_LABEL_PREFIX}{self.label}"


@dataclass(frozen=True)
class MoodScoreTag:
    score: int  # 0..4

    def encode(self) -> str:
        return f"{MOOD_SCORE_PREFIX}{self.score}"


MoodTag = Union[MoodLabelTag, MoodScoreTag]


# ---------- journal entries ----------

class EntryKind(str, Enum):
    JOURNAL = "journal"
    REFLECTION = "reflection"
    STORY = "story"

    @classmethod
    def parse(cls, value: Any) -> "EntryKind":
        s = str(value or "").strip().lower()
        if s in ("reflection", "reflexion", "reflektion", "reflection_entry"):
            return cls.REFLECTION
        if s in ("story", "kurzgeschichte", "short_story"):
            return cls.STORY
        return cls.JOURNAL

    @property
    def code(self) -> str:
        return {"journal": "j1", "reflection": "r1", "story": "s1"}[self.value]


def _parse_ts(v: Any) -> Optional[datetime]:
    """ISO string or epoch seconds/millis -> aware UTC datetime."""
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, datetime):
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)
    if isinstance(v, (int, float)):
        n = float(v)
        if abs(n) >= 1e12:
            n = n / 1000.0
        try:
            return datetime.fromtimestamp(n, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(v, str):
        s = v.strip()
        if not s:
            return None
        try:
            return _parse_ts(float(s))
        except ValueError:
            pass
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return _parse_ts(datetime.fromisoformat(s))
        except ValueError:
            return None
    return None


def _first_str(d: Mapping[str, Any], *keys: str) -> Optional[str]:
    for k in keys:
        v = d.get(k)
        if v is not None:
            return str(v)
    return None


def _as_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, float) and not math.isfinite(v):
        # json accepts Infinity / NaN
        return None
    if isinstance(v, (int, float)):
        return int(v)
    try:
        return int(str(v).strip())
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class JournalEntry:
    id: str
    created_at: datetime   # aware, UTC
    kind: EntryKind = EntryKind.JOURNAL
    tags: Tuple[str, ...] = ()
    title: Optional[str] = None
    thought_text: Optional[str] = None
    ai_question: Optional[str] = None
    user_answer: Optional[str] = None
    story_title: Optional[str] = None
    story_teaser: Optional[str] = None
    story_body: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "id": self.id,
            "kind": self.kind.value,
            "createdAt": self.created_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
            "title": self.title,
            "thoughtText": self.thought_text,
            "aiQuestion": self.ai_question,
            "userAnswer": self.user_answer,
            "storyTitle": self.story_title,
            "storyTeaser": self.story_teaser,
            "storyBody": self.story_body,
            "tags": list(self.tags),
        }
        return {k: v for k, v in d.items() if v is not None}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "JournalEntry":
        """Tolerant parser for stored/exported entries.

        Accepts legacy keys (created_at, ts, text, question, ...), comma
        separated tag strings, and top-level `mood` / `moodScore` fields, which
        are mirrored into tags when the tag form is missing.

        Raises ValueError when the record is not a mapping or carries no
        usable timestamp; callers skip such rows.
        """
        if not isinstance(d, Mapping):
            raise ValueError("journal entry must be an object")

        raw_ts = None
        for k in ("createdAt", "created_at", "ts", "timestamp", "created", "date"):
            if d.get(k) is not None:
                raw_ts = d.get(k)
                break
        created = _parse_ts(raw_ts)
        if created is None:
            raise ValueError(f"missing or invalid timestamp: {raw_ts!r}")

        raw_kind = _first_str(d, "kind", "type")
        if raw_kind is None:
            if any(k in d for k in ("storyBody", "story_title", "story_body", "storyTeaser")):
                raw_kind = "story"
            elif any(k in d for k in ("aiQuestion", "userAnswer", "question")):
                raw_kind = "reflection"
        kind = EntryKind.parse(raw_kind)

        tags: List[str] = []
        raw_tags = d.get("tags", d.get("tag"))
        if isinstance(raw_tags, (list, tuple)):
            tags = [str(t).strip() for t in raw_tags if t is not None and str(t).strip()]
        elif isinstance(raw_tags, str):
            tags = [t.strip() for t in raw_tags.split(",") if t.strip()]

        legacy_label = _first_str(d, "mood", "moodLabel")
        if legacy_label is not None and legacy_label.strip() and \
                not any(t.lower().startswith(MOOD_LABEL_PREFIX) for t in tags):
            tags.append(f"{MOOD_LABEL_PREFIX}{legacy_label.strip()}")
        legacy_score = _as_int(d.get("moodScore"))
        if legacy_score is not None and \
                not any(t.lower().startswith(MOOD_SCORE_PREFIX.lower()) for t in tags):
            tags.append(f"{MOOD_SCORE_PREFIX}{max(0, min(4, legacy_score))}")

        entry_id = _first_str(d, "id") or f"local-{int(created.timestamp() * 1000)}"
        return cls(
            id=entry_id,
            created_at=created,
            kind=kind,
            tags=tuple(tags),
            title=_first_str(d, "title", "label"),
            thought_text=_first_str(d, "thoughtText", "text", "body"),
            ai_question=_first_str(d, "aiQuestion", "question", "prompt"),
            user_answer=_first_str(d, "userAnswer", "answer", "response"),
            story_title=_first_str(d, "storyTitle", "story_title", "storyName"),
            story_teaser=_first_str(d, "storyTeaser", "story_teaser", "teaser"),
            story_body=_first_str(d, "storyBody", "story_body", "content"),
        )


def parse_entries(rows: Iterable[Any]) -> Tuple[List[JournalEntry], int]:
    """Parse many rows, skipping the ones from_dict rejects. Returns (entries, skipped)."""
    out: List[JournalEntry] = []
    skipped = 0
    for r in rows:
        try:
            out.append(JournalEntry.from_dict(r))
        except ValueError:
            skipped += 1
    return out, skipped


def _clean(s: Optional[str]) -> str:
    return (s or "").strip()


@dataclass(frozen=True)
class EntryView:
    """One timeline row; the unit the merger compares."""
    created_at: datetime
    kind: EntryKind
    text: str
    mood: str = ""
    ai_question: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def from_journal(cls, entry: JournalEntry) -> "EntryView":
        from .mood_scale import view_mood_label  # local import avoids a cycle

        if entry.kind == EntryKind.STORY:
            text = _clean(entry.story_teaser) or _clean(entry.story_title or entry.title) or "Kurzgeschichte"
        elif entry.kind == EntryKind.REFLECTION:
            text = _clean(entry.user_answer) or _clean(entry.thought_text) or _clean(entry.ai_question) or "Reflexion"
        else:
            text = _clean(entry.thought_text) or _clean(entry.title) or "Gedanke"

        return cls(
            created_at=entry.created_at,
            kind=entry.kind,
            text=text,
            mood="" if entry.kind == EntryKind.STORY else view_mood_label(entry.tags),
            ai_question=entry.ai_question if entry.kind == EntryKind.REFLECTION else None,
            id=entry.id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
            "kind": self.kind.value,
            "text": self.text,
            "mood": self.mood,
            "aiQuestion": self.ai_question,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "EntryView":
        created = _parse_ts(d.get("createdAt", d.get("date")))
        if created is None:
            raise ValueError("entry view needs a timestamp")
        return cls(
            created_at=created,
            kind=EntryKind.parse(d.get("kind")),
            text=str(d.get("text") or ""),
            mood=str(d.get("mood") or ""),
            ai_question=_first_str(d, "aiQuestion"),
            id=_first_str(d, "id"),
        )


# ---------- aggregation outputs ----------

@dataclass
class DayGroup:
    day: date
    label: str   # "Heute" / "Gestern" / "DD.MM.YYYY"
    entries: List[JournalEntry] = field(default_factory=list)

    def to_dict(self):
        return {
            "day": self.day.isoformat(),
            "label": self.label,
            "entryIds": [e.id for e in self.entries],
        }


@dataclass
class MoodSummary:
    days: int
    series: List[float]
    average: float
    active_days: int
    streak: int
    sparkline: List[float]
    entries: int

    def to_dict(self):
        return asdict(self)
