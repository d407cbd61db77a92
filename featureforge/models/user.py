from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from featureforge.database.base import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    firebase_uid = Column(String(128), unique=True, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    memberships = relationship("TeamMember", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship(
        "Notification",
        back_populates="user",
        foreign_keys="Notification.user_id",
        cascade="all, delete-orphan"
    )

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(String(20), nullable=False, index=True)  # mention, reply, feature_update
    related_id = Column(Integer, nullable=False)
    related_type = Column(String(20), nullable=False)  # comment, feature
    message = Column(Text, nullable=False)

    is_read = Column(Boolean, default=False, index=True)
    triggered_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # "metadata" is reserved on declarative classes
    meta_data = Column("metadata", JSON, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="notifications", foreign_keys=[user_id])
    trigger = relationship("User", foreign_keys=[triggered_by])
