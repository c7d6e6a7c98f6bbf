"""
Tessa Backend — Audio Summary Persistence
===========================================

What:  Storage adapter for completed audio analyses.
How:   Stateless; receives the request's AsyncSession on every call. All
       reads and deletes are owner-scoped queries (services/ownership.py).
Who:   routes/audio.py

Operations:
    create(db, owner_id, analysis)      → new AudioSummary
    list_by_owner(db, owner_id)         → newest first
    get_by_id(db, summary_id, owner_id) → NotFoundError when absent or not owned
    delete_by_id(db, summary_id, owner_id) → no-op when absent or not owned
"""

import logging
import uuid
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.exceptions import DatabaseError, NotFoundError
from tessa.models.audio_summary import AudioSummary
from tessa.schemas.audio import AudioAnalysisResult
from tessa.services.ownership import owner_scoped, owner_scoped_delete

logger = logging.getLogger(__name__)


class AudioSummaryService:
    async def create(
        self,
        db: AsyncSession,
        owner_id: uuid.UUID,
        analysis: AudioAnalysisResult,
    ) -> AudioSummary:
        summary = AudioSummary(
            owner_id=owner_id,
            title=analysis.title,
            keywords=list(analysis.keywords),
            transcript=analysis.transcript,
            summary=analysis.summary,
        )
        try:
            db.add(summary)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to store audio summary for user %s: %s", owner_id, str(e))
            raise DatabaseError(
                message="Could not save the audio summary. Please try again.",
                context={"owner_id": str(owner_id)},
            )

        logger.info("Audio summary %s created for user %s", summary.id, owner_id)
        return summary

    async def list_by_owner(self, db: AsyncSession, owner_id: uuid.UUID) -> List[AudioSummary]:
        stmt = owner_scoped(AudioSummary, owner_id).order_by(AudioSummary.created_at.desc())
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Failed to list audio summaries for user %s: %s", owner_id, str(e))
            raise DatabaseError(message="Could not retrieve audio summaries. Please try again.")
        return list(result.scalars().all())

    async def get_by_id(
        self,
        db: AsyncSession,
        summary_id: uuid.UUID,
        owner_id: uuid.UUID,
    ) -> AudioSummary:
        try:
            result = await db.execute(owner_scoped(AudioSummary, owner_id, summary_id))
        except SQLAlchemyError as e:
            logger.error("Failed to fetch audio summary %s: %s", summary_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the audio summary. Please try again.",
                context={"summary_id": str(summary_id)},
            )

        summary = result.scalar_one_or_none()
        if summary is None:
            raise NotFoundError(resource="Audio summary", resource_id=str(summary_id))
        return summary

    async def delete_by_id(
        self,
        db: AsyncSession,
        summary_id: uuid.UUID,
        owner_id: uuid.UUID,
    ) -> None:
        try:
            result = await db.execute(owner_scoped_delete(AudioSummary, owner_id, summary_id))
        except SQLAlchemyError as e:
            logger.error("Failed to delete audio summary %s: %s", summary_id, str(e))
            raise DatabaseError(
                message="Could not delete the audio summary. Please try again.",
                context={"summary_id": str(summary_id)},
            )
        logger.info(
            "Delete audio summary %s for user %s: %d row(s)",
            summary_id,
            owner_id,
            result.rowcount,
        )


audio_summary_service = AudioSummaryService()
