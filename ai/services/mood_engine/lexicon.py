# -*- coding: utf-8 -*-
"""Keyword bank for the rule-based emotion classifier (DE + EN).

Gentle, non-diagnostic cues. Neutral has no set of its own; it is the
default when nothing matches. Order inside each tuple is the scan order and
therefore the order of `matched_keywords`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .models import Emotion

EMOTION_KEYWORDS: Mapping[Emotion, Tuple[str, ...]] = MappingProxyType({
    Emotion.JOY: (
        "glücklich", "freude", "dankbar", "lachen", "zufrieden", "leicht",
        "happy", "joy", "grateful", "smile", "content", "uplifted",
    ),
    Emotion.SADNESS: (
        "traurig", "erschöpft", "verloren", "leer", "weinen", "niedergeschlagen",
        "sad", "tired", "exhausted", "lost", "down",
    ),
    Emotion.ANGER: (
        "wütend", "ärgerlich", "genervt", "frustriert", "gereizt",
        "angry", "mad", "furious", "annoyed", "irritated", "frustrated",
    ),
    Emotion.FEAR: (
        "ängstlich", "angst", "sorge", "unsicher", "panik", "bedrohlich",
        "afraid", "anxious", "fear", "worry", "panic", "unsafe",
    ),
    Emotion.CALM: (
        "ruhig", "gelassen", "ausgeglichen", "zentriert", "klar",
        "calm", "peaceful", "grounded", "centered", "clear",
    ),
    Emotion.SURPRISE: (
        "überrascht", "wow", "unerwartet", "krass", "what?!",
        "surprised", "shocked", "unexpected", "astonished", "wow",
    ),
    Emotion.COMPASSION: (
        "mitgefühl", "herzlich", "verstehen", "freundlich", "warmherzig",
        "compassion", "tender", "kind", "caring", "warm",
    ),
})

# Possible self-harm / suicidality cues. A signal, not a diagnosis; no
# negation handling ("I do not want to hurt myself" still matches).
CRISIS_KEYWORDS: Tuple[str, ...] = (
    # DE
    "suizid", "selbstmord", "ich will nicht mehr", "mich umbringen", "mich verletzen",
    "ritzen", "abschied nehmen", "keinen sinn",
    # EN
    "suicide", "kill myself", "end it all", "self harm", "hurt myself", "goodbye world",
)

# Ties on hit count go to the calmer / more positive emotion.
TIE_PREFERENCE: Tuple[Emotion, ...] = (
    Emotion.CALM,
    Emotion.JOY,
    Emotion.COMPASSION,
    Emotion.SURPRISE,
    Emotion.SADNESS,
    Emotion.FEAR,
    Emotion.ANGER,
)

REASON_TEXT: Mapping[str, Mapping[str, str]] = MappingProxyType({
    "de": MappingProxyType({
        "empty": "Kein Inhalt erkannt.",
        "soft": "Sanfte Schätzung basierend auf deinem Text.",
        "because": "Erkannt wegen: {keywords}{more}.",
    }),
    "en": MappingProxyType({
        "empty": "No content detected.",
        "soft": "Soft estimate based on your text.",
        "because": "Detected because of: {keywords}{more}.",
    }),
})
