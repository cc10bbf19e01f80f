"""
SQLAlchemy ORM models.

Owner references (Evidence.owner_id, ThirdParty.created_by) are plain indexed
columns without a database foreign key: removing a client leaves their records
in place, and the reference may dangle.
"""
from datetime import datetime, timezone
import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, Float, Enum
from sqlalchemy.orm import relationship

from grc.core.policy import Role
from grc.db.session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EvidenceCategory(str, enum.Enum):
    POLICY = "policy"
    DIAGRAM = "diagram"
    DOC = "doc"
    OTHER = "other"


def enum_values(enum_cls):
    return [e.value for e in enum_cls]


UserRoleType = Enum(*enum_values(Role), name='userrole')
EvidenceCategoryType = Enum(*enum_values(EvidenceCategory), name='evidencecategory')


class User(Base):
    """User accounts."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(UserRoleType, nullable=False, default=Role.CLIENT.value)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class Evidence(Base):
    """Metadata for one uploaded file plus the pointer to its stored bytes."""
    __tablename__ = "evidence"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    category = Column(EvidenceCategoryType, nullable=False, default=EvidenceCategory.OTHER.value)
    filename = Column(String(512), nullable=False)
    storage_path = Column(Text, nullable=False)
    size = Column(Integer, nullable=True)
    owner_id = Column(Integer, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    owner = relationship(
        "User",
        primaryjoin="foreign(Evidence.owner_id) == User.id",
        viewonly=True,
    )


class ThirdParty(Base):
    """Vendor / third-party risk record."""
    __tablename__ = "third_parties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), default="")
    company = Column(String(255), default="")
    role = Column(String(255), default="")  # free-text descriptor, unrelated to User.role
    industry = Column(String(255), default="", index=True)
    risk_score = Column(Float, nullable=False, default=0.0)
    created_by = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    creator = relationship(
        "User",
        primaryjoin="foreign(ThirdParty.created_by) == User.id",
        viewonly=True,
    )
