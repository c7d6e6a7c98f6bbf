"""
Tessa Backend — Audio Summary Persistence Tests
=================================================

Runs against the in-memory SQLite database from conftest.

What we test:
    ✅ create() stores every analysis field
    ✅ Listing is owner-scoped and newest first
    ✅ Another user's summary reads as not found
    ✅ Deletes are owner-scoped and idempotent
    ✅ Deleting a user removes their summaries
"""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from tessa.exceptions import NotFoundError
from tessa.models.audio_summary import AudioSummary
from tessa.schemas.audio import AudioAnalysisResult
from tessa.services.audio_summary_service import audio_summary_service


def _analysis(title: str = "Nota de voz") -> AudioAnalysisResult:
    return AudioAnalysisResult(
        title=title,
        keywords=["uno", "dos", "tres"],
        transcript=f"Transcripción de {title}",
        summary="Resumen corto.",
    )


class TestCreate:
    @pytest.mark.asyncio
    async def test_stores_all_fields(self, db_session, user):
        summary = await audio_summary_service.create(db_session, user.id, _analysis())

        assert summary.id is not None
        assert summary.owner_id == user.id
        assert summary.title == "Nota de voz"
        assert summary.keywords == ["uno", "dos", "tres"]
        assert summary.transcript == "Transcripción de Nota de voz"
        assert summary.summary == "Resumen corto."
        assert summary.created_at is not None


class TestOwnerScoping:
    @pytest.mark.asyncio
    async def test_list_only_returns_own_summaries(self, db_session, user, other_user):
        await audio_summary_service.create(db_session, user.id, _analysis("mine"))
        await audio_summary_service.create(db_session, other_user.id, _analysis("theirs"))

        mine = await audio_summary_service.list_by_owner(db_session, user.id)

        assert [s.title for s in mine] == ["mine"]
        assert all(s.owner_id == user.id for s in mine)

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, db_session, user):
        base = datetime(2026, 1, 1, 12, 0, 0)
        for offset, title in [(0, "oldest"), (2, "newest"), (1, "middle")]:
            db_session.add(
                AudioSummary(
                    owner_id=user.id,
                    title=title,
                    keywords=["k"],
                    transcript="t",
                    summary="s",
                    created_at=base + timedelta(minutes=offset),
                )
            )
        await db_session.flush()

        summaries = await audio_summary_service.list_by_owner(db_session, user.id)

        assert [s.title for s in summaries] == ["newest", "middle", "oldest"]

    @pytest.mark.asyncio
    async def test_list_empty_for_new_user(self, db_session, user):
        assert await audio_summary_service.list_by_owner(db_session, user.id) == []

    @pytest.mark.asyncio
    async def test_get_own_summary(self, db_session, user):
        created = await audio_summary_service.create(db_session, user.id, _analysis())

        fetched = await audio_summary_service.get_by_id(db_session, created.id, user.id)

        assert fetched.id == created.id

    @pytest.mark.asyncio
    async def test_get_other_users_summary_is_not_found(self, db_session, user, other_user):
        theirs = await audio_summary_service.create(db_session, other_user.id, _analysis())

        with pytest.raises(NotFoundError, match="Audio summary"):
            await audio_summary_service.get_by_id(db_session, theirs.id, user.id)

    @pytest.mark.asyncio
    async def test_get_unknown_id_is_not_found(self, db_session, user):
        with pytest.raises(NotFoundError):
            await audio_summary_service.get_by_id(db_session, uuid.uuid4(), user.id)


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_own_summary(self, db_session, user):
        created = await audio_summary_service.create(db_session, user.id, _analysis())

        await audio_summary_service.delete_by_id(db_session, created.id, user.id)

        with pytest.raises(NotFoundError):
            await audio_summary_service.get_by_id(db_session, created.id, user.id)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, db_session, user):
        created = await audio_summary_service.create(db_session, user.id, _analysis())

        await audio_summary_service.delete_by_id(db_session, created.id, user.id)
        await audio_summary_service.delete_by_id(db_session, created.id, user.id)
        await audio_summary_service.delete_by_id(db_session, uuid.uuid4(), user.id)

    @pytest.mark.asyncio
    async def test_delete_cannot_touch_other_users_summary(self, db_session, user, other_user):
        theirs = await audio_summary_service.create(db_session, other_user.id, _analysis())

        await audio_summary_service.delete_by_id(db_session, theirs.id, user.id)

        still_there = await audio_summary_service.get_by_id(db_session, theirs.id, other_user.id)
        assert still_there.id == theirs.id

    @pytest.mark.asyncio
    async def test_deleting_user_cascades(self, db_session, user, other_user):
        await audio_summary_service.create(db_session, user.id, _analysis("mine"))
        await audio_summary_service.create(db_session, other_user.id, _analysis("theirs"))

        await db_session.delete(user)
        await db_session.flush()
        db_session.expunge_all()

        result = await db_session.execute(select(AudioSummary.title))
        assert result.scalars().all() == ["theirs"]
