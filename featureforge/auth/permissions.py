from typing import Iterable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from featureforge.models import TeamMember, User
from featureforge.constants import TeamRoles


def get_membership(db: Session, team_id: int, user_id: int) -> Optional[TeamMember]:
    """
    Returns the user's membership row in a team, or None.
    """
    return db.query(TeamMember).filter(
        TeamMember.team_id == team_id,
        TeamMember.user_id == user_id
    ).first()

def require_team_member(db: Session, team_id: int, user: User, detail: str, status_code: int = 403) -> TeamMember:
    """
    Ensures the user belongs to the team.

    Args:
        db: Database session
        team_id: Team to check
        user: The acting user
        detail: Error message when the check fails
        status_code: 403 by default; 404 where membership hides existence

    Returns:
        TeamMember: The user's membership row

    Raises:
        HTTPException: If the user is not a member
    """
    membership = get_membership(db, team_id, user.id)
    if not membership:
        raise HTTPException(status_code=status_code, detail=detail)
    return membership

def require_team_role(db: Session, team_id: int, user: User, roles: Iterable[str], detail: str) -> TeamMember:
    """
    Ensures the user holds one of the given roles in the team.

    Raises:
        HTTPException: 403 if not a member or the role does not match
    """
    membership = get_membership(db, team_id, user.id)
    if not membership or membership.role not in roles:
        raise HTTPException(status_code=403, detail=detail)
    return membership

def require_team_admin(db: Session, team_id: int, user: User, detail: str) -> TeamMember:
    return require_team_role(db, team_id, user, [TeamRoles.ADMIN], detail)
