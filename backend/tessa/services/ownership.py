"""
Owner-scoped query helpers.

Every read, update and delete of a user-owned row goes through these
builders, so the owner predicate is part of the SQL statement itself. A row
owned by someone else is then indistinguishable from a missing one.
"""

import uuid
from typing import Dict, Optional, Type

from sqlalchemy import Delete, Select, delete, select

from tessa.database import Base
from tessa.models.audio_summary import AudioSummary
from tessa.models.project import Project
from tessa.models.user import User

OWNER_COLUMNS: Dict[Type[Base], object] = {
    Project: Project.user_id,
    AudioSummary: AudioSummary.owner_id,
}


def owner_column(model: Type[Base]):
    try:
        return OWNER_COLUMNS[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not an owner-scoped model")


def owner_scoped(
    model: Type[Base],
    owner_id: uuid.UUID,
    resource_id: Optional[uuid.UUID] = None,
) -> Select:
    """SELECT model WHERE owner = :owner_id [AND id = :resource_id]."""
    stmt = select(model).where(owner_column(model) == owner_id)
    if resource_id is not None:
        stmt = stmt.where(model.id == resource_id)
    return stmt


def owner_scoped_delete(model: Type[Base], owner_id: uuid.UUID, resource_id: uuid.UUID) -> Delete:
    """DELETE FROM model WHERE id = :resource_id AND owner = :owner_id."""
    return delete(model).where(model.id == resource_id, owner_column(model) == owner_id)


def locked_owner(owner_id: uuid.UUID) -> Select:
    """
    SELECT user ... FOR UPDATE, reloading the in-session User.

    Quota checks and plan purchases run this first so that concurrent
    requests of the same owner serialize on the user row until commit, and
    the check then sees the plan as committed by the previous request.
    SQLite has no row locks and ignores FOR UPDATE.
    """
    return (
        select(User)
        .where(User.id == owner_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
