from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, DateTime, Date, JSON,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from datetime import datetime
from featureforge.database.base import Base

class Feature(Base):
    __tablename__ = "features"
    __table_args__ = (
        Index("ix_features_team_type", "team_id", "type"),
        Index("ix_features_team_parent", "team_id", "parent_id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="backlog")
    priority = Column(String(20), nullable=False, default="medium")
    type = Column(String(20), nullable=False, default="task")

    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by_email = Column(String(255), nullable=True)
    assigned_to = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    tags = Column(JSON, default=list)
    due_date = Column(Date, nullable=True)
    votes = Column(Integer, nullable=False, default=0)
    impact = Column(Integer, nullable=False, default=5)
    effort = Column(Integer, nullable=False, default=5)
    category = Column(String(50), nullable=True)
    target_release = Column(String(50), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Hierarchy
    parent_id = Column(Integer, ForeignKey("features.id", ondelete="CASCADE"), nullable=True, index=True)
    parent = relationship("Feature", remote_side=[id], back_populates="children")
    children = relationship("Feature", back_populates="parent", cascade="all, delete-orphan")

    team = relationship("Team", back_populates="features")
    creator = relationship("User", foreign_keys=[created_by])
    assignee = relationship("User", foreign_keys=[assigned_to])
    comments = relationship("Comment", back_populates="feature", cascade="all, delete-orphan")

    outgoing_dependencies = relationship(
        "FeatureDependency",
        foreign_keys="FeatureDependency.source_feature_id",
        back_populates="source_feature",
        cascade="all, delete-orphan"
    )
    incoming_dependencies = relationship(
        "FeatureDependency",
        foreign_keys="FeatureDependency.target_feature_id",
        back_populates="target_feature",
        cascade="all, delete-orphan"
    )

class FeatureDependency(Base):
    """
    Typed directed edge between two features of the same team.
    Types with an inverse are stored as two rows, one per direction.
    """
    __tablename__ = "feature_dependencies"
    __table_args__ = (
        UniqueConstraint(
            "source_feature_id", "target_feature_id", "dependency_type",
            name="unique_dependency_relationship"
        ),
        CheckConstraint("source_feature_id <> target_feature_id", name="ck_dependency_not_self"),
        Index("ix_dependency_source_type", "source_feature_id", "dependency_type"),
        Index("ix_dependency_target_type", "target_feature_id", "dependency_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    source_feature_id = Column(Integer, ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True)
    target_feature_id = Column(Integer, ForeignKey("features.id", ondelete="CASCADE"), nullable=False, index=True)
    dependency_type = Column(String(20), nullable=False)  # blocks, blocked_by, depends_on, relates_to
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    source_feature = relationship(
        "Feature", foreign_keys=[source_feature_id], back_populates="outgoing_dependencies"
    )
    target_feature = relationship(
        "Feature", foreign_keys=[target_feature_id], back_populates="incoming_dependencies"
    )
    creator = relationship("User")
