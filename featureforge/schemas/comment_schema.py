from pydantic import BaseModel, Field
from typing import Optional

class CommentCreate(BaseModel):
    content: Optional[str] = None
    parent_id: Optional[int] = Field(None, alias="parentId")

    class Config:
        populate_by_name = True

class CommentUpdate(BaseModel):
    content: Optional[str] = None
