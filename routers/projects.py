from typing import Annotated
from fastapi import APIRouter, Depends, Request
from starlette import status
from middleware.rate_limiter import limiter
from schemas.project_schemas import (CREATE_PROJECT_RULES, PROJECT_STATUS_RULES, UPDATE_PROJECT_RULES,
                                     serialize_event, serialize_project)
from services.project_service import ProjectService
from utils.deps import db_dependency, identity_dependency
from utils.validation import validate_body


router = APIRouter(
    prefix="/api/projects",
    tags=["projects"]
)


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def create_project(request: Request, identity: identity_dependency, db: db_dependency,
                         form: Annotated[dict, Depends(validate_body(CREATE_PROJECT_RULES))]):
    project = ProjectService.create(db, identity, form)
    return {
        "success": True,
        "message": "Project created successfully",
        "data": {"project": serialize_project(project)},
    }


@router.get("", status_code=status.HTTP_200_OK)
async def list_projects(identity: identity_dependency, db: db_dependency, status: str | None = None,
                        search: str | None = None, page: int = 1, limit: int = 10):
    result = ProjectService.list_projects(db, identity, status=status, search=search, page=page, limit=limit)
    result["projects"] = [serialize_project(project) for project in result["projects"]]
    return {"success": True, "data": result}


@router.get("/analytics", status_code=status.HTTP_200_OK)
async def project_analytics(identity: identity_dependency, db: db_dependency):
    analytics = ProjectService.analytics(db, identity)
    analytics["recentActivity"] = [
        {
            "id": project.id,
            "name": project.name,
            "status": project.status,
            "updatedAt": project.updated_at,
            "timeline": [serialize_event(event) for event in project.timeline],
        }
        for project in analytics["recentActivity"]
    ]
    return {"success": True, "data": analytics}


@router.get("/{project_id}", status_code=status.HTTP_200_OK)
async def get_project(project_id: int, identity: identity_dependency, db: db_dependency):
    project = ProjectService.get(db, identity, project_id)
    return {"success": True, "data": {"project": serialize_project(project)}}


@router.put("/{project_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_project(request: Request, project_id: int, identity: identity_dependency, db: db_dependency,
                         form: Annotated[dict, Depends(validate_body(UPDATE_PROJECT_RULES))]):
    project = ProjectService.update(db, identity, project_id, form)
    return {
        "success": True,
        "message": "Project updated successfully",
        "data": {"project": serialize_project(project)},
    }


@router.delete("/{project_id}", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def delete_project(request: Request, project_id: int, identity: identity_dependency, db: db_dependency):
    ProjectService.delete(db, identity, project_id)
    return {"success": True, "message": "Project deleted successfully"}


@router.patch("/{project_id}/status", status_code=status.HTTP_200_OK)
@limiter.limit("30/minute")
async def update_project_status(request: Request, project_id: int, identity: identity_dependency,
                                db: db_dependency,
                                form: Annotated[dict, Depends(validate_body(PROJECT_STATUS_RULES))]):
    project = ProjectService.set_status(db, identity, project_id, form["status"], form.get("reason"))
    return {
        "success": True,
        "message": f"Project status updated to {project.status}",
        "data": {"project": serialize_project(project)},
    }
