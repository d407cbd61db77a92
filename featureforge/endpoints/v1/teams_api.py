from typing import Optional

from fastapi import APIRouter, Depends, BackgroundTasks
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.schemas import TeamCreate, TeamUpdate, MemberInvite, MemberRoleUpdate, FeatureCreate, FeatureUpdate
from featureforge.utils import team_service, feature_service, dependency_service, comment_service
from featureforge.utils.email_service import EmailAnalytics, get_email_analytics, dispatch_invitation
from featureforge.utils.common import success_response
from featureforge.auth.dependencies import get_current_user
from featureforge.models import User
from featureforge.constants import SuccessMessages

router = APIRouter(prefix="/teams", tags=["Teams"])

@router.post("", status_code=201)
def create_team(
    team_data: TeamCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Creates a new team. The creator becomes its admin.
    """
    return success_response(team_service.create_team(db, team_data, current_user))

@router.get("/my-teams")
def get_my_teams(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(team_service.get_my_teams(db, current_user))

@router.get("/{team_id}")
def get_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(team_service.get_team(db, team_id, current_user))

@router.put("/{team_id}")
def update_team(
    team_id: int,
    team_update: TeamUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(team_service.update_team(db, team_id, team_update, current_user))

@router.delete("/{team_id}")
def delete_team(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    team_service.delete_team(db, team_id, current_user)
    return success_response(message=SuccessMessages.TEAM_DELETED)

@router.get("/{team_id}/settings")
def get_team_settings(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Team details with member list and limits. Team admins only.
    """
    return success_response(team_service.get_team_settings(db, team_id, current_user))

# ---------------- MEMBERS ---------------- #

@router.get("/{team_id}/members")
def get_team_members(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(team_service.get_team_members(db, team_id, current_user))

@router.get("/{team_id}/members/mentions")
def get_mention_candidates(
    team_id: int,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Members whose name contains ``q``, for @mention autocomplete.
    """
    return success_response(comment_service.get_team_members_for_mentions(db, team_id, current_user, q))

@router.post("/{team_id}/members", status_code=201)
async def add_team_member(
    team_id: int,
    invite: MemberInvite,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    analytics: EmailAnalytics = Depends(get_email_analytics)
):
    """
    Adds a member by email and sends them an invitation.

    Email failures never fail the request; the membership is already saved.
    """
    member, is_new_user, team_name = await run_in_threadpool(
        team_service.add_team_member,
        db, team_id, invite.email, invite.role, current_user
    )

    await dispatch_invitation(
        background_tasks,
        analytics,
        member["email"],
        team_name,
        current_user.name,
        is_new_user
    )

    template = SuccessMessages.MEMBER_INVITED if is_new_user else SuccessMessages.MEMBER_ADDED
    return success_response(member, message=template.format(email=member["email"]))

@router.put("/{team_id}/members/{user_id}")
def update_member_role(
    team_id: int,
    user_id: int,
    role_update: MemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(
        team_service.update_team_member_role(db, team_id, user_id, role_update.role, current_user)
    )

@router.delete("/{team_id}/members/{user_id}")
def remove_team_member(
    team_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    team_service.remove_team_member(db, team_id, user_id, current_user)
    return success_response(message=SuccessMessages.MEMBER_REMOVED)

# ---------------- FEATURES ---------------- #

@router.get("/{team_id}/features")
def get_team_features(
    team_id: int,
    status: Optional[str] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.get_team_features(db, team_id, current_user, status, type))

@router.post("/{team_id}/features", status_code=201)
def create_team_feature(
    team_id: int,
    feature_data: FeatureCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.create_team_feature(db, team_id, feature_data, current_user))

@router.get("/{team_id}/features/stats")
def get_team_feature_stats(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.get_team_feature_stats(db, team_id, current_user))

@router.put("/{team_id}/features/{feature_id}")
def update_team_feature(
    team_id: int,
    feature_id: int,
    feature_update: FeatureUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Partial update. Status changes need the admin or product-owner team role.
    """
    return success_response(
        feature_service.update_team_feature(db, team_id, feature_id, feature_update, current_user)
    )

@router.delete("/{team_id}/features/{feature_id}")
def delete_team_feature(
    team_id: int,
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    feature_service.delete_team_feature(db, team_id, feature_id, current_user)
    return success_response(message=SuccessMessages.FEATURE_DELETED)

@router.get("/{team_id}/dependencies")
def get_team_dependencies(
    team_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(dependency_service.get_team_dependencies(db, team_id, current_user))
