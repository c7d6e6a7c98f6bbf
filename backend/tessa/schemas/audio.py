"""
Tessa Backend — Audio Analysis Schemas
========================================

What:  The transient analysis result produced by the pipeline and the
       response models for persisted audio summaries.

AudioAnalysisResult carries no length or count constraints: the model output
is parsed into it first and checked for completeness afterwards, so a short
keyword list or a long title never turns into a pydantic error at the API
boundary.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class AudioAnalysisResult(BaseModel):
    title: str = ""
    keywords: List[str] = Field(default_factory=list)
    transcript: str = ""
    summary: str = ""

    def missing_fields(self) -> List[str]:
        """Names of the fields that are empty (whitespace counts as empty)."""
        missing = []
        if not self.title.strip():
            missing.append("title")
        if not self.keywords:
            missing.append("keywords")
        if not self.transcript.strip():
            missing.append("transcript")
        if not self.summary.strip():
            missing.append("summary")
        return missing


class AudioSummaryResponse(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    keywords: List[str]
    transcript: str
    summary: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AudioAnalyzeResponse(BaseModel):
    message: str = "Audio analyzed successfully"
    audio_summary: AudioSummaryResponse


class AudioSummaryEnvelope(BaseModel):
    message: str = "Audio summary retrieved successfully"
    summary: AudioSummaryResponse


class AudioSummaryListResponse(BaseModel):
    message: str = "Audio summaries retrieved successfully"
    summaries: List[AudioSummaryResponse]
