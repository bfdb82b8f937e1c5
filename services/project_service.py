import math
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from core.exceptions import NotFound, Unauthorized
from middleware.auth import Identity
from models.enums import ProjectStatus
from models.projects import Project
from schemas.project_schemas import map_form_to_project
from utils.logger import get_logger

logger = get_logger(__name__)


def _owner_id(identity: Identity) -> int:
    # projects belong to accounts; a header-only admin has none
    if identity.user_id is None:
        raise Unauthorized("User authentication required")
    return identity.user_id


class ProjectService:

    @staticmethod
    def create(db: Session, identity: Identity, form: dict) -> Project:
        project = Project(
            **map_form_to_project(form),
            status=form.get("status") or ProjectStatus.DRAFT.value,
            created_by=_owner_id(identity),
        )
        project.record("project_created", "Project created and submitted for review")

        db.add(project)
        db.commit()
        db.refresh(project)

        logger.info("Project created", extra={"project_id": project.id, "user_id": identity.user_id})
        return project

    @staticmethod
    def list_projects(db: Session, identity: Identity, status: str | None = None, search: str | None = None,
                      page: int = 1, limit: int = 10) -> dict:
        page = max(page, 1)
        limit = max(limit, 1)

        query = db.query(Project).filter(Project.created_by == _owner_id(identity))
        if status and status != "all":
            query = query.filter(Project.status == status)
        if search:
            query = query.filter(or_(
                Project.name.ilike(f"%{search}%"),
                Project.description.ilike(f"%{search}%"),
            ))

        total = query.count()
        projects = (
            query.order_by(Project.created_at.desc(), Project.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "projects": projects,
            "pagination": {
                "current": page,
                "total": math.ceil(total / limit),
                "count": len(projects),
                "totalItems": total,
            },
        }

    @staticmethod
    def get(db: Session, identity: Identity, project_id: int) -> Project:
        """Owner-scoped lookup: someone else's project is reported as missing."""
        project = (
            db.query(Project)
            .filter(Project.id == project_id, Project.created_by == _owner_id(identity))
            .first()
        )
        if not project:
            raise NotFound("Project not found")
        return project

    @staticmethod
    def update(db: Session, identity: Identity, project_id: int, form: dict) -> Project:
        project = ProjectService.get(db, identity, project_id)
        for column, value in map_form_to_project(form, partial=True).items():
            setattr(project, column, value)
        if form.get("status"):
            project.change_status(form["status"])

        db.commit()
        db.refresh(project)

        logger.info("Project updated", extra={"project_id": project.id, "user_id": identity.user_id})
        return project

    @staticmethod
    def delete(db: Session, identity: Identity, project_id: int) -> None:
        project = ProjectService.get(db, identity, project_id)
        db.delete(project)
        db.commit()
        logger.info("Project deleted", extra={"project_id": project_id, "user_id": identity.user_id})

    @staticmethod
    def set_status(db: Session, identity: Identity, project_id: int, status: str,
                   reason: str | None = None) -> Project:
        project = ProjectService.get(db, identity, project_id)
        if project.change_status(status, reason):
            db.commit()
            db.refresh(project)
            logger.info("Project status changed", extra={"project_id": project.id, "status": status})
        return project

    @staticmethod
    def analytics(db: Session, identity: Identity) -> dict:
        owner_id = _owner_id(identity)

        rows = (
            db.query(Project.status, func.count(Project.id))
            .filter(Project.created_by == owner_id)
            .group_by(Project.status)
            .all()
        )
        counts = {status: count for status, count in rows}

        recent = (
            db.query(Project)
            .filter(Project.created_by == owner_id)
            .order_by(Project.updated_at.desc(), Project.id.desc())
            .limit(5)
            .all()
        )

        return {
            "summary": {
                "totalProjects": sum(counts.values()),
                "activeProjects": counts.get(ProjectStatus.ACTIVE.value, 0),
                "inReviewProjects": counts.get(ProjectStatus.IN_REVIEW.value, 0),
                "completedProjects": counts.get(ProjectStatus.COMPLETED.value, 0),
            },
            "statusBreakdown": [
                {"status": status, "count": counts[status]}
                for status in ProjectStatus.values() if status in counts
            ],
            "recentActivity": recent,
        }
