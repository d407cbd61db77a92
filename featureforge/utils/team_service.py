import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException

from featureforge.auth.auth_utils import hash_password, generate_temporary_password
from featureforge.auth.permissions import require_team_member, require_team_admin
from featureforge.config.settings import settings
from featureforge.constants import ErrorMessages, TeamRoles
from featureforge.models import Team, TeamMember, User
from featureforge.schemas import TeamCreate, TeamUpdate
from featureforge.utils.common import get_object_or_404
from featureforge.utils.utils import team_to_dict, member_to_dict, user_summary

logger = logging.getLogger(__name__)

def _member_count(db: Session, team_id: int) -> int:
    return db.query(TeamMember).filter(TeamMember.team_id == team_id).count()

def _validate_role(role: str):
    if role not in TeamRoles.ALL_ROLES:
        raise HTTPException(status_code=400, detail=ErrorMessages.INVALID_ROLE)

def validate_team_size(db: Session, team_id: int):
    """
    Rejects a new member once the team holds MAX_TEAM_SIZE members.

    Raises:
        HTTPException: 400 when the team is full
    """
    if _member_count(db, team_id) >= settings.MAX_TEAM_SIZE:
        raise HTTPException(status_code=400, detail=ErrorMessages.TEAM_SIZE_EXCEEDED)

def validate_user_team_count(db: Session, user_id: int):
    """
    Rejects a membership that would put a user in more than MAX_TEAMS_PER_USER teams.

    Raises:
        HTTPException: 400 when the user is already at the limit
    """
    team_count = db.query(TeamMember).filter(TeamMember.user_id == user_id).count()
    if team_count >= settings.MAX_TEAMS_PER_USER:
        raise HTTPException(
            status_code=400,
            detail=ErrorMessages.USER_TEAM_LIMIT.format(limit=settings.MAX_TEAMS_PER_USER)
        )

def create_team(db: Session, team_data: TeamCreate, user: User):
    """
    Creates a new team with the creator as its first admin.

    Args:
        db: Database session
        team_data: Team creation data (name, description)
        user: The creator

    Returns:
        dict: The created team

    Raises:
        HTTPException: If the name is blank or the creator is in too many teams
    """
    if not team_data.name or not team_data.name.strip():
        raise HTTPException(status_code=400, detail="Team name is required")

    validate_user_team_count(db, user.id)

    team = Team(
        name=team_data.name.strip(),
        description=team_data.description,
        created_by=user.id,
        created_by_email=user.email
    )
    db.add(team)
    db.flush()

    db.add(TeamMember(team_id=team.id, user_id=user.id, role=TeamRoles.ADMIN))
    db.commit()
    db.refresh(team)

    logger.info(f"Team {team.id} created by user {user.id}")
    return team_to_dict(team)

def get_my_teams(db: Session, user: User):
    """
    Retrieves the teams the user belongs to, with their role in each.
    """
    memberships = (
        db.query(TeamMember)
        .options(joinedload(TeamMember.team))
        .filter(TeamMember.user_id == user.id)
        .order_by(TeamMember.joined_at.asc(), TeamMember.id.asc())
        .all()
    )
    team_ids = [m.team_id for m in memberships]
    counts = dict(
        db.query(TeamMember.team_id, func.count(TeamMember.id))
        .filter(TeamMember.team_id.in_(team_ids))
        .group_by(TeamMember.team_id)
        .all()
    ) if team_ids else {}

    result = []
    for m in memberships:
        data = team_to_dict(m.team)
        data["role"] = m.role
        data["joined_at"] = m.joined_at.isoformat() if m.joined_at else None
        data["member_count"] = counts.get(m.team_id, 0)
        result.append(data)
    return result

def get_team(db: Session, team_id: int, user: User):
    """
    Retrieves a team by ID for one of its members.

    Raises:
        HTTPException: 403 for non-members, 404 if the team is gone
    """
    require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_VIEW_TEAM)

    team = db.query(Team).options(joinedload(Team.creator)).filter(Team.id == team_id).first()
    if not team:
        raise HTTPException(status_code=404, detail=ErrorMessages.TEAM_NOT_FOUND)

    data = team_to_dict(team)
    data["member_count"] = _member_count(db, team_id)
    data["creator"] = user_summary(team.creator)
    return data

def update_team(db: Session, team_id: int, team_update: TeamUpdate, user: User):
    """
    Updates name and description. Team admins only.
    """
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_UPDATE_TEAM)

    team = get_object_or_404(db, Team, team_id, ErrorMessages.TEAM_NOT_FOUND)

    if team_update.name:
        team.name = team_update.name.strip()
    if team_update.description is not None:
        team.description = team_update.description

    db.commit()
    db.refresh(team)
    return team_to_dict(team)

def delete_team(db: Session, team_id: int, user: User):
    """
    Deletes a team together with its members, features, comments and dependencies.
    """
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_DELETE_TEAM)

    team = get_object_or_404(db, Team, team_id, ErrorMessages.TEAM_NOT_FOUND)

    db.delete(team)
    db.commit()

    logger.info(f"Team {team_id} deleted by user {user.id}")
    return True

def get_team_settings(db: Session, team_id: int, user: User):
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_TEAM_SETTINGS)

    team = get_object_or_404(db, Team, team_id, ErrorMessages.TEAM_NOT_FOUND)

    data = team_to_dict(team)
    data["members"] = _list_members(db, team_id)
    data["limits"] = {
        "max_team_size": settings.MAX_TEAM_SIZE,
        "max_teams_per_user": settings.MAX_TEAMS_PER_USER,
    }
    return data

def _list_members(db: Session, team_id: int):
    members = (
        db.query(TeamMember)
        .options(joinedload(TeamMember.user))
        .filter(TeamMember.team_id == team_id)
        .order_by(TeamMember.joined_at.asc(), TeamMember.id.asc())
        .all()
    )
    return [member_to_dict(m) for m in members if m.user]

def get_team_members(db: Session, team_id: int, user: User):
    require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_VIEW_MEMBERS)
    return _list_members(db, team_id)

def add_team_member(db: Session, team_id: int, email: str, role: str, user: User):
    """
    Adds a user to a team by email, creating the account if needed.

    The team row is locked while the member count is checked so concurrent
    invitations cannot both pass the size check.

    Args:
        db: Database session
        team_id: Target team
        email: Invitee email
        role: Team role for the invitee
        user: The acting team admin

    Returns:
        tuple: (member dict, is_new_user, team name)

    Raises:
        HTTPException: 403 non-admin, 404 unknown team, 400 for duplicates or limits
    """
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_ADD_MEMBERS)

    email = (email or "").strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail=ErrorMessages.EMAIL_REQUIRED)
    role = role or TeamRoles.USER
    _validate_role(role)

    team = db.query(Team).filter(Team.id == team_id).with_for_update().first()
    if not team:
        raise HTTPException(status_code=404, detail=ErrorMessages.TEAM_NOT_FOUND)

    user_to_add = db.query(User).filter(User.email == email).first()
    is_new_user = False

    if user_to_add:
        existing = db.query(TeamMember).filter(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_to_add.id
        ).first()
        if existing:
            raise HTTPException(status_code=400, detail=ErrorMessages.ALREADY_MEMBER)

    validate_team_size(db, team_id)

    if user_to_add:
        validate_user_team_count(db, user_to_add.id)
    else:
        user_to_add = User(
            name=email.split("@")[0],
            email=email,
            hashed_password=hash_password(generate_temporary_password())
        )
        db.add(user_to_add)
        db.flush()
        is_new_user = True

    membership = TeamMember(team_id=team_id, user_id=user_to_add.id, role=role)
    db.add(membership)
    db.commit()
    db.refresh(membership)

    logger.info(f"User {user_to_add.id} added to team {team_id} as {role}")
    data = member_to_dict(membership)
    data["is_new_user"] = is_new_user
    return data, is_new_user, team.name

def remove_team_member(db: Session, team_id: int, target_user_id: int, user: User):
    """
    Removes a member. Admins may remove anyone, themselves included.
    """
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_REMOVE_MEMBERS)

    membership = db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == target_user_id
    ).first()
    if not membership:
        raise HTTPException(status_code=404, detail=ErrorMessages.MEMBER_NOT_FOUND)

    db.delete(membership)
    db.commit()
    return True

def update_team_member_role(db: Session, team_id: int, target_user_id: int, role: str, user: User):
    require_team_admin(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_UPDATE_ROLES)
    _validate_role(role)

    membership = db.query(TeamMember).options(joinedload(TeamMember.user)).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == target_user_id
    ).first()
    if not membership:
        raise HTTPException(status_code=404, detail=ErrorMessages.MEMBER_NOT_FOUND)

    membership.role = role
    db.commit()
    db.refresh(membership)
    return member_to_dict(membership)
