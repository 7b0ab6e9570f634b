"""Project router - API endpoints for project management."""
from fastapi import APIRouter, Depends, Query, Response, status

from timetracker.database import get_database
from timetracker.models.project import Project, ProjectCreate, ProjectUpdate
from timetracker.routers.auth import get_current_user_id
from timetracker.services.project_service import ProjectService
from timetracker.services.query_service import QueryService


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=Project, status_code=status.HTTP_201_CREATED)
async def create_project(
    project: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new project.

    Args:
        project: Project creation data
        user_id: Current user ID (from token)
        db: Database connection

    Returns:
        Created project object
    """
    service = ProjectService(db)
    return await service.create_project(user_id=user_id, project_create=project)


@router.get("", response_model=list[Project])
async def list_projects(
    include_inactive: bool = Query(False, description="Include deleted projects"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List projects for the current user, ordered by name.

    Args:
        include_inactive: Also list soft-deleted projects
        user_id: Current user ID (from token)
        db: Database connection

    Returns:
        List of projects
    """
    service = QueryService(db)
    return await service.list_projects(user_id=user_id, include_inactive=include_inactive)


@router.get("/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    include_inactive: bool = Query(False, description="Allow deleted projects"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a project by ID.

    Raises:
        NotFoundError: If project not found (404)
    """
    service = ProjectService(db)
    return await service.get_project(
        user_id=user_id,
        project_id=project_id,
        include_inactive=include_inactive,
    )


@router.patch("/{project_id}", response_model=Project)
async def update_project(
    project_id: str,
    project_update: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a project.

    Args:
        project_id: Project ID
        project_update: Update data
        user_id: Current user ID (from token)
        db: Database connection

    Returns:
        Updated project object

    Raises:
        NotFoundError: If project not found (404)
    """
    service = ProjectService(db)
    return await service.update_project(
        user_id=user_id,
        project_id=project_id,
        project_update=project_update,
    )


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Soft delete a project.

    Time entries keep their reference to the project.
    """
    service = ProjectService(db)
    await service.delete_project(user_id=user_id, project_id=project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
