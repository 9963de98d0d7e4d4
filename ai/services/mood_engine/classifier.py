# -*- coding: utf-8 -*-
"""
classifier.py

Rule-based emotion detection for journal text.

- Every non-neutral emotion owns a keyword list (lexicon.py, DE + EN).
- A keyword hits when the lowercased text contains it, when the
  accent-folded text contains its folded form, or when a word-boundary
  regex matches.
- The emotion with most hits wins; ties go through TIE_PREFERENCE; no hits
  at all means neutral.
- Confidence grows with how concentrated the hits are on the winner and
  stays inside [0.55, 0.98].
- Crisis cues are checked in a separate pass and only set `is_crisis`.

An optional JSON file can replace the built-in tables:
    {
      "keywords": { "joy": ["happy", ...], "calm": [...] },
      "crisis": ["...", ...]
    }
Missing or broken files fall back to the built-in tables.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Pattern, Tuple

from . import config
from .lexicon import CRISIS_KEYWORDS, EMOTION_KEYWORDS, REASON_TEXT, TIE_PREFERENCE
from .models import (
    CONFIDENCE_MAX,
    CONFIDENCE_MIN,
    CONFIDENCE_NEUTRAL,
    CONFIDENCE_NO_HITS,
    DetectedEmotionResult,
    Emotion,
)
from .normalize import normalize_keyword
from .observability import log_event

logger = logging.getLogger("mood_engine.classifier")

MAX_REASON_KEYWORDS = 5


def _reason_texts(locale: Optional[str]) -> Mapping[str, str]:
    loc = (locale or config.MOOD_DEFAULT_LOCALE or "de").lower()
    return REASON_TEXT["en"] if loc.startswith("en") else REASON_TEXT["de"]


def confidence_from_hits(best_hits: int, total_hits: int) -> float:
    if total_hits <= 0 or best_hits <= 0:
        return CONFIDENCE_NO_HITS
    ratio = best_hits / total_hits
    return max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, CONFIDENCE_MIN + 0.43 * ratio))


def best_emotion(scores: Mapping[Emotion, int]) -> Emotion:
    candidates = {e: n for e, n in scores.items() if e != Emotion.NEUTRAL}
    if all(n == 0 for n in candidates.values()):
        return Emotion.NEUTRAL
    top = max(candidates.values())
    tied = [e for e, n in candidates.items() if n == top]
    for e in TIE_PREFERENCE:
        if e in tied:
            return e
    return tied[0]


class EmotionClassifier:
    """
    Text -> DetectedEmotionResult.

    Pure and synchronous; `classify_async` exists so a network-backed model
    can replace the heuristic later without touching callers.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        if config_path is None and config.MOOD_KEYWORDS_PATH:
            config_path = Path(config.MOOD_KEYWORDS_PATH)
        self.config_path = config_path

        keywords, crisis = self._load_config(config_path)
        self.keywords: Mapping[Emotion, Tuple[str, ...]] = keywords
        self.crisis_keywords: Tuple[str, ...] = crisis
        self._patterns: Dict[str, Pattern[str]] = {}
        for kw in [k for kws in keywords.values() for k in kws] + list(crisis):
            low = kw.lower()
            if low not in self._patterns:
                self._patterns[low] = re.compile(r"\b" + re.escape(low) + r"\b")

    # ---------- public ----------

    def classify(self, text: Optional[str], locale: Optional[str] = None) -> DetectedEmotionResult:
        raw = (text or "").strip()
        if not raw:
            return self.neutral_result(locale)

        lower = raw.lower()
        normed = normalize_keyword(lower)

        is_crisis = any(self._contains(lower, normed, kw) for kw in self.crisis_keywords)

        scores: Dict[Emotion, int] = {e: 0 for e in Emotion}
        matched: List[str] = []
        for emotion, kws in self.keywords.items():
            for kw in kws:
                if self._contains(lower, normed, kw):
                    scores[emotion] += 1
                    matched.append(kw)

        best = best_emotion(scores)
        conf = confidence_from_hits(scores[best], len(matched))

        texts = _reason_texts(locale)
        if not matched:
            reason = texts["soft"]
        else:
            extra = len(matched) - MAX_REASON_KEYWORDS
            reason = texts["because"].format(
                keywords=", ".join(matched[:MAX_REASON_KEYWORDS]),
                more=f" (+{extra})" if extra > 0 else "",
            )

        log_event(
            logger,
            "emotion_classified",
            level="debug",
            emotion=best.value,
            confidence=round(conf, 4),
            hits=len(matched),
            best_hits=scores[best],
            crisis=is_crisis,
        )
        if is_crisis:
            # advisory only; never used as a gate
            log_event(logger, "emotion_crisis_signal", level="warning", emotion=best.value)

        return DetectedEmotionResult(
            emotion=best,
            confidence=conf,
            reason=reason,
            is_crisis=is_crisis,
            matched_keywords=tuple(matched),
        )

    async def classify_async(
        self,
        text: Optional[str],
        locale: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> DetectedEmotionResult:
        """Awaitable classify. A timeout yields the neutral result instead of an error."""
        t = config.MOOD_CLASSIFIER_TIMEOUT_SECONDS if timeout is None else timeout
        try:
            if t and t > 0:
                return await asyncio.wait_for(self._run(text, locale), timeout=t)
            return await self._run(text, locale)
        except asyncio.TimeoutError:
            log_event(logger, "emotion_classify_timeout", level="warning", timeout_s=t)
            return self.neutral_result(locale)

    def neutral_result(self, locale: Optional[str] = None) -> DetectedEmotionResult:
        return DetectedEmotionResult(
            emotion=Emotion.NEUTRAL,
            confidence=CONFIDENCE_NEUTRAL,
            reason=_reason_texts(locale)["empty"],
        )

    # ---------- internals ----------

    async def _run(self, text: Optional[str], locale: Optional[str]) -> DetectedEmotionResult:
        # the heuristic never suspends; a model backend would await here
        await asyncio.sleep(0)
        return self.classify(text, locale)

    def _contains(self, lower: str, normed: str, kw: str) -> bool:
        k_lower = kw.lower()
        if k_lower in lower or normalize_keyword(k_lower) in normed:
            return True
        rx = self._patterns.get(k_lower)
        return bool(rx and rx.search(lower))

    def _load_config(
        self, path: Optional[Path]
    ) -> Tuple[Mapping[Emotion, Tuple[str, ...]], Tuple[str, ...]]:
        """
        Built-in tables unless `path` points to a readable override file.
        Sections missing from the file keep their built-in values.
        """
        if path is None:
            return EMOTION_KEYWORDS, CRISIS_KEYWORDS
        if not path.exists():
            logger.warning("Keyword file %s not found; using built-in keywords.", path)
            return EMOTION_KEYWORDS, CRISIS_KEYWORDS

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load keyword file %s: %s", path, exc)
            return EMOTION_KEYWORDS, CRISIS_KEYWORDS
        if not isinstance(raw, dict):
            logger.warning("Keyword file %s is not an object: %r", path, type(raw))
            return EMOTION_KEYWORDS, CRISIS_KEYWORDS

        keywords: Mapping[Emotion, Tuple[str, ...]] = EMOTION_KEYWORDS
        section = raw.get("keywords")
        if isinstance(section, dict):
            table: Dict[Emotion, Tuple[str, ...]] = {}
            for name, kws in section.items():
                emotion = next((e for e in Emotion if e.value == str(name).strip().lower()), None)
                if emotion is None or emotion == Emotion.NEUTRAL or not isinstance(kws, list):
                    continue
                cleaned = tuple(str(k).strip() for k in kws if str(k).strip())
                if cleaned:
                    table[emotion] = cleaned
            if table:
                keywords = MappingProxyType(table)

        crisis = CRISIS_KEYWORDS
        c_section = raw.get("crisis")
        if isinstance(c_section, list):
            cleaned_c = tuple(str(k).strip() for k in c_section if str(k).strip())
            if cleaned_c:
                crisis = cleaned_c

        logger.info("Loaded keyword file %s (emotions=%d, crisis=%d)", path, len(keywords), len(crisis))
        return keywords, crisis


class LatestClassification:
    """
    Latest-wins gate for live input (e.g. a transcript that keeps growing).

    Submitting text for a key cancels the classification still running for
    that key; the superseded `submit` returns None so a stale result can never
    overwrite a newer one.
    """

    def __init__(self, classifier: Optional[EmotionClassifier] = None, timeout: Optional[float] = None) -> None:
        self._classifier = classifier or EmotionClassifier()
        self._timeout = timeout
        self._tasks: Dict[str, "asyncio.Task[DetectedEmotionResult]"] = {}
        self._generation: Dict[str, int] = {}
        # gate-wide so a key that was dropped never reuses an old number
        self._counter = itertools.count(1)

    def pending(self) -> int:
        """Keys with a submission still in flight."""
        return len(self._generation)

    async def submit(self, key: str, text: Optional[str], locale: Optional[str] = None) -> Optional[DetectedEmotionResult]:
        prev = self._tasks.get(key)
        if prev is not None and not prev.done():
            prev.cancel()

        gen = next(self._counter)
        self._generation[key] = gen
        task = asyncio.ensure_future(self._classifier.classify_async(text, locale, self._timeout))
        self._tasks[key] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if self._generation.get(key) == gen:
                raise
            return None
        finally:
            latest = self._generation.get(key) == gen
            if latest:
                # newest submission for this key has settled
                self._tasks.pop(key, None)
                self._generation.pop(key, None)

        return result if latest else None


default_classifier = EmotionClassifier()


def classify(text: Optional[str], locale: Optional[str] = None) -> DetectedEmotionResult:
    return default_classifier.classify(text, locale)
