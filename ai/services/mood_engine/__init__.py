from .models import (
    EMOTION_TABLE, MOOD_LABELS, DayGroup, DetectedEmotionResult, Emotion, EntryKind,
    EntryView, JournalEntry, MoodLabelTag, MoodScoreTag, MoodSummary, parse_entries,
)
from .normalize import fold_diacritics, collapse_whitespace
from .mood_scale import (
    emotion_to_label, emotion_to_score, label_to_score, score_tag_to_score,
    parse_mood_tag, resolve_mood_tag, mood_value_from_tags, mood_tags_for,
)
from .classifier import EmotionClassifier, LatestClassification, classify
from .aggregator import (
    daily_series, average_mood, active_day_count, streak, mood_sparkline,
    reflections_count, group_by_day, entries_for_local_day, summarize,
)
from .merger import EntryMerger, fingerprint, merge_timelines, find_recent_duplicate
