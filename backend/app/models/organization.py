"""Organization models - companies, their applications and user access.

These tables are owned by the surrounding management API; the assessment
core only reads them.
"""
import uuid
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel as PydanticBaseModel
from sqlalchemy import CheckConstraint, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.assessment import Assessment


class Company(BaseModel):
    """Client company whose applications are assessed."""

    __tablename__ = "companies"

    # Multi-tenancy support
    tenant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    document: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # Relationships
    applications: Mapped[List["Application"]] = relationship(
        "Application", back_populates="company", cascade="all, delete-orphan"
    )
    user_access: Mapped[List["UserCompanyAccess"]] = relationship(
        "UserCompanyAccess", back_populates="company", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Company(name={self.name})>"


class Application(BaseModel):
    """Software application owned by a company; the unit being assessed."""

    __tablename__ = "applications"

    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    company: Mapped["Company"] = relationship("Company", back_populates="applications")
    assessments: Mapped[List["Assessment"]] = relationship(
        "Assessment", back_populates="application"
    )

    def __repr__(self) -> str:
        return f"<Application(name={self.name}, company={self.company_id})>"


class UserCompanyAccess(BaseModel):
    """Grants a user a role inside a company."""

    __tablename__ = "user_company_access"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False, index=True)
    company_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="VIEWER")

    company: Mapped["Company"] = relationship("Company", back_populates="user_access")

    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_user_company_access"),
        CheckConstraint(
            "role IN ('OWNER', 'ADMIN', 'EDITOR', 'VIEWER')",
            name="ck_user_company_access_role",
        ),
    )

    def __repr__(self) -> str:
        return f"<UserCompanyAccess(user={self.user_id}, company={self.company_id}, role={self.role})>"


# Pydantic model for authenticated user (not stored in DB)
class User(PydanticBaseModel):
    """Authenticated caller decoded from the bearer token."""
    id: uuid.UUID
    email: Optional[str] = None
    name: Optional[str] = None
