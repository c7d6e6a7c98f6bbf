"""
Tessa Backend — Project Routes
================================

Owner-scoped CRUD. Every handler requires a bearer token; a project owned by
another user answers exactly like a missing one (404).
"""

import uuid

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tessa.database import get_db_session
from tessa.dependencies import get_current_user
from tessa.models.user import User
from tessa.schemas.common import ErrorResponse
from tessa.schemas.project import (
    ProjectCreate,
    ProjectEnvelope,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from tessa.services.project_service import project_service

router = APIRouter(
    prefix="/api/projects",
    tags=["Projects"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get("", response_model=ProjectListResponse, summary="List my projects, newest first")
async def list_projects(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectListResponse:
    projects = await project_service.list_projects(db, user.id)
    return ProjectListResponse(projects=[ProjectResponse.model_validate(p) for p in projects])


@router.post(
    "",
    status_code=201,
    response_model=ProjectEnvelope,
    responses={403: {"description": "Plan project quota reached", "model": ErrorResponse}},
    summary="Create a project",
)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    project = await project_service.create_project(db, user, body.name)
    return ProjectEnvelope(
        message="Project created successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.get(
    "/{project_id}",
    response_model=ProjectEnvelope,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Get one of my projects",
)
async def get_project(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    project = await project_service.get_project(db, project_id, user.id)
    return ProjectEnvelope(
        message="Project retrieved successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.put(
    "/{project_id}",
    response_model=ProjectEnvelope,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Rename a project",
)
async def update_project(
    project_id: uuid.UUID,
    body: ProjectUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    project = await project_service.update_project(db, project_id, user.id, body.name)
    return ProjectEnvelope(
        message="Project updated successfully",
        project=ProjectResponse.model_validate(project),
    )


@router.delete(
    "/{project_id}",
    status_code=204,
    response_class=Response,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Delete a project",
)
async def delete_project(
    project_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await project_service.delete_project(db, project_id, user.id)
    return Response(status_code=204)
