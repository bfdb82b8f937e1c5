from core.database import Base
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from models.enums import ProjectStatus
from models.mixins import CreatedAtMixin, TimestampMixin


class Project(Base, TimestampMixin):
    """
    A brand's sourcing request. Every status change is recorded as a
    ``ProjectEvent`` so the timeline reads oldest first.
    """
    __tablename__ = "projects"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    owner = relationship("User", back_populates="projects")
    timeline = relationship("ProjectEvent", back_populates="project", cascade="all, delete-orphan",
                            order_by="ProjectEvent.id")

    name = Column(String(200), nullable=False)
    description = Column(String(2000), nullable=False)
    status = Column(Enum(*ProjectStatus.values(), name="project_status", native_enum=False),
                    nullable=False, default=ProjectStatus.DRAFT.value, index=True)
    # {id, name, type, image, category}
    selected_product = Column(JSON, nullable=True)
    # {id, name}
    selected_supplier_type = Column(JSON, nullable=True)
    volume = Column(String, nullable=False)
    units = Column(String, nullable=False)
    packaging = Column(JSON, nullable=False, default=list)
    packaging_objects = Column(JSON, nullable=False, default=list)
    location = Column(JSON, nullable=False, default=lambda: ["Global"])
    allergen = Column(JSON, nullable=False, default=list)
    certification = Column(JSON, nullable=False, default=list)
    additional = Column(String(1000))
    anonymous = Column(Boolean, nullable=False, default=False)
    hide_from_current = Column(Boolean, nullable=False, default=False)

    def record(self, event: str, description: str | None = None) -> "ProjectEvent":
        entry = ProjectEvent(event=event, description=description)
        self.timeline.append(entry)
        return entry

    def change_status(self, status: str, reason: str | None = None) -> bool:
        """Sets ``status`` and logs it on the timeline. Re-setting the same status is a no-op."""
        if status == self.status:
            return False
        self.status = status
        self.record(f"status_changed_to_{status}", reason or f"Project status changed to {status}")
        return True


class ProjectEvent(Base, CreatedAtMixin):
    __tablename__ = "project_events"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    project = relationship("Project", back_populates="timeline")

    event = Column(String, nullable=False)
    description = Column(String)
