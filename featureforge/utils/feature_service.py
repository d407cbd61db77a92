import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from featureforge.auth.permissions import require_team_member, require_team_role, get_membership
from featureforge.constants import (
    ErrorMessages, FeatureTypes, FeatureStatus, Priority, TeamRoles,
    NotificationTypes, RelatedTypes, FEATURE_TITLE_MAX_LENGTH
)
from featureforge.models import Feature, User
from featureforge.schemas import FeatureCreate, FeatureUpdate
from featureforge.utils.hierarchy import HierarchyError, can_have_children, validate_placement
from featureforge.utils.notification_service import create_notification
from featureforge.utils.utils import feature_to_dict, feature_summary

logger = logging.getLogger(__name__)

def normalize_status(value: Optional[str]) -> str:
    """
    Maps legacy status spellings onto the four stored statuses.
    Anything unrecognised becomes backlog.
    """
    if not value:
        return FeatureStatus.BACKLOG
    key = value.strip().lower()
    if key in FeatureStatus.ALL_STATUSES:
        return key
    return FeatureStatus.ALIASES.get(key, FeatureStatus.BACKLOG)

def normalize_priority(value: Optional[str]) -> str:
    if not value:
        return Priority.MEDIUM
    key = value.strip().lower()
    key = Priority.ALIASES.get(key, key)
    if key not in Priority.ALL_PRIORITIES:
        raise HTTPException(status_code=400, detail=ErrorMessages.INVALID_PRIORITY)
    return key

def _validate_type(value: Optional[str]) -> str:
    feature_type = (value or FeatureTypes.TASK).strip().lower()
    if feature_type not in FeatureTypes.ALL_TYPES:
        raise HTTPException(status_code=400, detail=ErrorMessages.INVALID_FEATURE_TYPE)
    return feature_type

def _validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail=ErrorMessages.TITLE_REQUIRED)
    if len(title) > FEATURE_TITLE_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=ErrorMessages.TITLE_TOO_LONG.format(limit=FEATURE_TITLE_MAX_LENGTH)
        )
    return title

def _validate_assignee(db: Session, team_id: int, assigned_to: Optional[int]):
    if assigned_to and not get_membership(db, team_id, assigned_to):
        raise HTTPException(status_code=400, detail=ErrorMessages.ASSIGNEE_NOT_MEMBER)

def _resolve_parent(db: Session, team_id: int, parent_id: int, child_type: str, feature_id: Optional[int] = None) -> Feature:
    """
    Loads the prospective parent and checks it against the hierarchy rules.

    Raises:
        HTTPException: 404 missing parent, 400 other team or rule violation
    """
    parent = db.query(Feature).filter(Feature.id == parent_id).first()
    if not parent:
        raise HTTPException(status_code=404, detail=ErrorMessages.PARENT_FEATURE_NOT_FOUND)
    if parent.team_id != team_id:
        raise HTTPException(status_code=400, detail=ErrorMessages.PARENT_DIFFERENT_TEAM)

    try:
        validate_placement(parent, child_type, feature_id)
    except HierarchyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return parent

def get_accessible_feature(db: Session, feature_id: int, user: User) -> Feature:
    """
    Returns the feature when the user belongs to its team.

    Features in other teams are reported as missing rather than forbidden.
    """
    feature = db.query(Feature).filter(Feature.id == feature_id).first()
    if not feature or not get_membership(db, feature.team_id, user.id):
        raise HTTPException(status_code=404, detail=ErrorMessages.FEATURE_NOT_FOUND_OR_NO_ACCESS)
    return feature

def create_team_feature(db: Session, team_id: int, data: FeatureCreate, user: User):
    """
    Creates a feature in a team.

    Args:
        db: Database session
        team_id: Owning team
        data: Feature fields
        user: The acting member

    Returns:
        dict: The created feature

    Raises:
        HTTPException: 403 for non-members, 400/404 for invalid fields or parent
    """
    require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_CREATE_FEATURE)

    title = _validate_title(data.title)
    feature_type = _validate_type(data.type)
    priority = normalize_priority(data.priority)
    status = normalize_status(data.status)
    _validate_assignee(db, team_id, data.assigned_to)

    if data.parent_id:
        _resolve_parent(db, team_id, data.parent_id, feature_type)

    feature = Feature(
        title=title,
        description=data.description,
        status=status,
        priority=priority,
        type=feature_type,
        parent_id=data.parent_id,
        team_id=team_id,
        created_by=user.id,
        created_by_email=user.email,
        assigned_to=data.assigned_to,
        tags=data.tags or [],
        due_date=data.due_date,
        impact=data.impact or 5,
        effort=data.effort or 5,
        category=data.category,
        target_release=data.target_release
    )
    db.add(feature)
    db.commit()
    db.refresh(feature)

    logger.info(f"Feature {feature.id} ({feature.type}) created in team {team_id} by user {user.id}")
    return feature_to_dict(feature)

def get_team_features(
    db: Session,
    team_id: int,
    user: User,
    status: Optional[str] = None,
    type: Optional[str] = None
):
    require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_VIEW_FEATURES)

    query = db.query(Feature).options(
        joinedload(Feature.creator),
        joinedload(Feature.assignee)
    ).filter(Feature.team_id == team_id)
    if status:
        query = query.filter(Feature.status == normalize_status(status))
    if type:
        query = query.filter(Feature.type == type)

    features = query.order_by(Feature.created_at.desc(), Feature.id.desc()).all()
    return [feature_to_dict(f) for f in features]

def get_team_feature_stats(db: Session, team_id: int, user: User):
    """
    Counts a team's features by status, priority and type.
    """
    require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_TEAM_STATS)

    def _counts(column, keys):
        rows = db.query(column, func.count(Feature.id)).filter(
            Feature.team_id == team_id
        ).group_by(column).all()
        counts = {k: 0 for k in keys}
        counts.update({k: c for k, c in rows})
        return counts

    by_status = _counts(Feature.status, FeatureStatus.ALL_STATUSES)
    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_priority": _counts(Feature.priority, Priority.ALL_PRIORITIES),
        "by_type": _counts(Feature.type, FeatureTypes.ALL_TYPES),
    }

def get_feature(db: Session, feature_id: int, user: User):
    feature = get_accessible_feature(db, feature_id, user)
    data = feature_to_dict(feature)
    data["parent"] = feature_summary(feature.parent)
    data["children_count"] = len(feature.children)
    return data

def get_feature_children(db: Session, feature_id: int, user: User):
    feature = get_accessible_feature(db, feature_id, user)
    children = (
        db.query(Feature)
        .filter(Feature.parent_id == feature.id)
        .order_by(Feature.created_at.asc(), Feature.id.asc())
        .all()
    )
    return [feature_to_dict(c) for c in children]

def update_team_feature(db: Session, team_id: int, feature_id: int, data: FeatureUpdate, user: User):
    """
    Applies a partial update to a feature.

    Only team admins and product owners may move a feature between statuses.
    Type and parent changes are re-validated against the current tree.

    Raises:
        HTTPException: 403 for non-members or status changes by plain users,
            404 for unknown features, 400 for invalid fields
    """
    membership = require_team_member(db, team_id, user, ErrorMessages.NOT_AUTHORIZED_UPDATE_FEATURE)

    feature = db.query(Feature).filter(
        Feature.id == feature_id,
        Feature.team_id == team_id
    ).first()
    if not feature:
        raise HTTPException(status_code=404, detail=ErrorMessages.FEATURE_NOT_FOUND)

    changes = data.model_dump(exclude_unset=True)
    old_status = feature.status

    if "status" in changes:
        new_status = normalize_status(changes["status"])
        if new_status != feature.status and membership.role not in TeamRoles.FEATURE_MANAGERS:
            raise HTTPException(status_code=403, detail=ErrorMessages.NOT_AUTHORIZED_CHANGE_STATUS)
        changes["status"] = new_status

    if "title" in changes:
        changes["title"] = _validate_title(changes["title"])
    if "priority" in changes:
        changes["priority"] = normalize_priority(changes["priority"])
    if "assigned_to" in changes:
        _validate_assignee(db, team_id, changes["assigned_to"])

    new_type = feature.type
    if "type" in changes:
        new_type = _validate_type(changes["type"])
        changes["type"] = new_type
        if new_type != feature.type and feature.children and not can_have_children(new_type):
            raise HTTPException(status_code=400, detail=ErrorMessages.HAS_CHILDREN_TYPE)

    new_parent_id = changes["parent_id"] if "parent_id" in changes else feature.parent_id
    if new_parent_id and ("type" in changes or "parent_id" in changes):
        _resolve_parent(db, team_id, new_parent_id, new_type, feature.id)

    for field, value in changes.items():
        if field == "tags" and value is None:
            value = []
        setattr(feature, field, value)

    if feature.status != old_status and feature.assigned_to and feature.assigned_to != user.id:
        create_notification(
            db,
            user_id=feature.assigned_to,
            type=NotificationTypes.FEATURE_UPDATE,
            related_id=feature.id,
            related_type=RelatedTypes.FEATURE,
            message=f'{user.name} moved "{feature.title}" to {feature.status}',
            triggered_by=user.id,
            metadata={"feature_id": feature.id, "old_status": old_status, "new_status": feature.status},
            commit=False
        )

    db.commit()
    db.refresh(feature)
    return feature_to_dict(feature)

def delete_team_feature(db: Session, team_id: int, feature_id: int, user: User):
    require_team_role(db, team_id, user, TeamRoles.FEATURE_MANAGERS, ErrorMessages.NOT_AUTHORIZED_DELETE_FEATURE)

    feature = db.query(Feature).filter(
        Feature.id == feature_id,
        Feature.team_id == team_id
    ).first()
    if not feature:
        raise HTTPException(status_code=404, detail=ErrorMessages.FEATURE_NOT_FOUND)

    db.delete(feature)
    db.commit()

    logger.info(f"Feature {feature_id} deleted from team {team_id} by user {user.id}")
    return True

def vote_feature(db: Session, feature_id: int, user: User):
    feature = get_accessible_feature(db, feature_id, user)
    feature.votes = (feature.votes or 0) + 1
    db.commit()
    db.refresh(feature)
    return feature_to_dict(feature)
