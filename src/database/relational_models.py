"""SQLAlchemy models for the relational store (users and projects)."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship

RelationalBase = declarative_base()


class User(RelationalBase):
    """User model.

    Usernames and emails are unique across the store. A user owns zero or
    more projects, which are deleted together with the user.
    """

    __tablename__ = "users"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity fields
    username = Column(String, unique=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    # Relationships
    projects = relationship(
        "Project",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Project.id",
    )

    # Indexes
    __table_args__ = (
        Index("idx_users_username", "username"),
        Index("idx_users_email", "email"),
    )

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"
        )

    def to_dict(self) -> dict:
        """Convert user to dictionary format (projects are not included)."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


class Project(RelationalBase):
    """Project model owned by a user.

    Timestamps are managed by the service layer: both are set on creation
    and ``updated_at`` is refreshed on every modification.
    """

    __tablename__ = "projects"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core attributes
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    # Foreign key to users
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    # Relationships
    user = relationship("User", back_populates="projects", lazy="joined")

    # Indexes
    __table_args__ = (
        Index("idx_projects_user", "user_id"),
        Index("idx_projects_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', user_id={self.user_id})>"
