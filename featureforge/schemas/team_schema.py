from pydantic import BaseModel
from typing import Optional

class TeamCreate(BaseModel):
    name: str
    description: Optional[str] = None

class TeamUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

class MemberInvite(BaseModel):
    email: str
    role: Optional[str] = "user"

class MemberRoleUpdate(BaseModel):
    role: str
