from pydantic import BaseModel, Field
from datetime import date
from typing import Optional, List

class FeatureCreate(BaseModel):
    title: str
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[int] = Field(None, alias="parentId")
    assigned_to: Optional[int] = Field(None, alias="assignedTo")
    tags: List[str] = []
    due_date: Optional[date] = Field(None, alias="dueDate")
    impact: Optional[int] = Field(None, ge=1, le=10)
    effort: Optional[int] = Field(None, ge=1, le=10)
    category: Optional[str] = None
    target_release: Optional[str] = Field(None, alias="targetRelease")

    class Config:
        populate_by_name = True

class FeatureUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    type: Optional[str] = None
    parent_id: Optional[int] = Field(None, alias="parentId")
    assigned_to: Optional[int] = Field(None, alias="assignedTo")
    tags: Optional[List[str]] = None
    due_date: Optional[date] = Field(None, alias="dueDate")
    impact: Optional[int] = Field(None, ge=1, le=10)
    effort: Optional[int] = Field(None, ge=1, le=10)
    category: Optional[str] = None
    target_release: Optional[str] = Field(None, alias="targetRelease")

    class Config:
        populate_by_name = True

class DependencyCreate(BaseModel):
    # Both optional so a missing field gets the domain error message
    target_feature_id: Optional[int] = Field(None, alias="targetFeatureId")
    dependency_type: Optional[str] = Field(None, alias="dependencyType")
    description: Optional[str] = None

    class Config:
        populate_by_name = True
