"""
Tessa Backend — Project Service
=================================

What:  Owner-scoped project CRUD with plan quotas.
Who:   routes/projects.py

Quota Rule:
    A user may own at most PLAN_QUOTAS[user.plan] projects. The check runs
    for every plan; reaching the limit raises QuotaExceededError (403).
    The owner row is locked first, so concurrent creates by one user are
    counted one after another.
"""

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.exceptions import NotFoundError, QuotaExceededError
from tessa.models.project import Project
from tessa.models.user import User
from tessa.plans import project_quota
from tessa.services.ownership import locked_owner, owner_scoped

logger = logging.getLogger(__name__)


class ProjectService:
    async def count_projects(self, db: AsyncSession, user_id: uuid.UUID) -> int:
        result = await db.execute(
            select(func.count()).select_from(Project).where(Project.user_id == user_id)
        )
        return result.scalar_one()

    async def create_project(self, db: AsyncSession, user: User, name: str) -> Project:
        await db.execute(locked_owner(user.id))
        limit = project_quota(user.plan)
        count = await self.count_projects(db, user.id)
        if count >= limit:
            logger.info("User %s reached the %s project quota (%d)", user.id, user.plan.value, limit)
            raise QuotaExceededError(plan=user.plan.value, limit=limit)

        project = Project(name=name, user_id=user.id)
        db.add(project)
        await db.flush()
        logger.info("Project %s created for user %s (%d/%d)", project.id, user.id, count + 1, limit)
        return project

    async def list_projects(self, db: AsyncSession, user_id: uuid.UUID) -> List[Project]:
        result = await db.execute(
            owner_scoped(Project, user_id).order_by(Project.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_project(self, db: AsyncSession, project_id: uuid.UUID, user_id: uuid.UUID) -> Project:
        result = await db.execute(owner_scoped(Project, user_id, project_id))
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError(resource="Project", resource_id=str(project_id))
        return project

    async def update_project(
        self,
        db: AsyncSession,
        project_id: uuid.UUID,
        user_id: uuid.UUID,
        name: str,
    ) -> Project:
        project = await self.get_project(db, project_id, user_id)
        project.name = name
        await db.flush()
        await db.refresh(project)
        return project

    async def delete_project(self, db: AsyncSession, project_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Raises NotFoundError when the project is absent or owned by someone else."""
        project = await self.get_project(db, project_id, user_id)
        await db.delete(project)
        await db.flush()
        logger.info("Project %s deleted by user %s", project_id, user_id)


project_service = ProjectService()
