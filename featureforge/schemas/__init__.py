from featureforge.schemas.user_schema import LoginRequest, RegisterRequest
from featureforge.schemas.team_schema import TeamCreate, TeamUpdate, MemberInvite, MemberRoleUpdate
from featureforge.schemas.feature_schema import FeatureCreate, FeatureUpdate, DependencyCreate
from featureforge.schemas.comment_schema import CommentCreate, CommentUpdate

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "TeamCreate",
    "TeamUpdate",
    "MemberInvite",
    "MemberRoleUpdate",
    "FeatureCreate",
    "FeatureUpdate",
    "DependencyCreate",
    "CommentCreate",
    "CommentUpdate",
]
