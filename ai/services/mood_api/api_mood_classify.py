# -*- coding: utf-8 -*-
"""
Mood Classify API
-----------------
- POST /mood/classify

Role:
- Turn a journal text (typed or transcribed) into an emotion, a bounded
  confidence, the matched keywords and the mood tags the app stores with
  the entry.

Notes:
- `locale` only picks the language of `label` / `reason`; the keyword bank
  is always DE + EN.
- `isCrisis` is advisory. The app shows support resources; nothing here
  escalates on its own.
- The text is never logged.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI
from pydantic import BaseModel, Field

from mood_engine import config
from mood_engine.classifier import default_classifier

logger = logging.getLogger("mood_api.classify")

MAX_TEXT_CHARS = 20000


class ClassifyRequest(BaseModel):
    text: str = Field("", max_length=MAX_TEXT_CHARS, description="Free text of the entry (may be empty)")
    locale: Optional[str] = Field(default=None, description="de / en; only affects label and reason")


class ClassifyResponse(BaseModel):
    emotion: str
    confidence: float
    emoji: str
    color: int
    reason: Optional[str] = None
    isCrisis: bool = False
    matchedKeywords: List[str] = []
    label: str = Field(..., description="Display name of the emotion in the requested locale")
    moodLabel: str = Field(..., description="Journal mood label (Glücklich .. Wütend)")
    moodScore: int = Field(..., description="0..4")
    tags: List[str] = Field(..., description="mood:<label> and moodScore:<n> tags for storage")


def register_mood_classify_routes(app: FastAPI) -> None:
    """Register /mood/classify endpoint."""

    @app.post("/mood/classify", response_model=ClassifyResponse)
    async def mood_classify(req: ClassifyRequest) -> ClassifyResponse:
        result = await default_classifier.classify_async(req.text, req.locale)
        return ClassifyResponse(
            **result.to_dict(),
            label=result.label(req.locale or config.MOOD_DEFAULT_LOCALE),
            moodLabel=result.mood_label,
            moodScore=result.mood_score,
            tags=list(result.mood_tags()),
        )
