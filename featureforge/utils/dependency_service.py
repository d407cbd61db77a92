"""
Typed dependency edges between features.

Every type with an inverse is stored as two rows, the primary edge and its
mirror, and both rows are always written or removed in the same commit.
``depends_on`` has no inverse and is stored once.
"""
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from featureforge.auth.permissions import require_team_member, get_membership
from featureforge.constants import (
    ErrorMessages, DependencyTypes, FeatureStatus, DEPENDENCY_DESCRIPTION_MAX_LENGTH
)
from featureforge.models import Feature, FeatureDependency, User
from featureforge.utils.utils import dependency_to_dict, feature_summary

logger = logging.getLogger(__name__)

def get_dependency_types():
    return [
        {
            "value": value,
            "label": config["label"],
            "description": config["description"],
            "inverse": config["inverse"],
        }
        for value, config in DependencyTypes.CONFIG.items()
    ]

def _edge_exists(db: Session, source_id: int, target_id: int, dependency_type: str) -> bool:
    return db.query(FeatureDependency).filter(
        FeatureDependency.source_feature_id == source_id,
        FeatureDependency.target_feature_id == target_id,
        FeatureDependency.dependency_type == dependency_type
    ).first() is not None

def _load_edge(db: Session, dependency_id: int) -> FeatureDependency:
    return db.query(FeatureDependency).options(
        joinedload(FeatureDependency.source_feature),
        joinedload(FeatureDependency.target_feature),
        joinedload(FeatureDependency.creator)
    ).filter(FeatureDependency.id == dependency_id).first()

def create_dependency(
    db: Session,
    source_feature_id: int,
    target_feature_id: Optional[int],
    dependency_type: Optional[str],
    description: Optional[str],
    user: User
):
    """
    Creates a dependency from the source feature to the target feature.

    Args:
        db: Database session
        source_feature_id: Feature the edge starts from
        target_feature_id: Feature the edge points to
        dependency_type: One of DependencyTypes.ALL_TYPES
        description: Optional note, at most 500 characters
        user: Acting user, must belong to the source feature's team

    Returns:
        dict: The primary edge

    Raises:
        HTTPException: 400 on invalid input, duplicates or direct cycles,
            404 when a feature is missing or not visible to the user
    """
    if not target_feature_id or not dependency_type:
        raise HTTPException(status_code=400, detail=ErrorMessages.DEPENDENCY_FIELDS_REQUIRED)

    if dependency_type not in DependencyTypes.CONFIG:
        raise HTTPException(status_code=400, detail=ErrorMessages.INVALID_DEPENDENCY_TYPE)

    if description and len(description) > DEPENDENCY_DESCRIPTION_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=ErrorMessages.DESCRIPTION_TOO_LONG.format(limit=DEPENDENCY_DESCRIPTION_MAX_LENGTH)
        )

    if source_feature_id == target_feature_id:
        raise HTTPException(status_code=400, detail=ErrorMessages.SELF_DEPENDENCY)

    source = db.query(Feature).filter(Feature.id == source_feature_id).first()
    target = db.query(Feature).filter(Feature.id == target_feature_id).first()
    if not source or not target:
        raise HTTPException(status_code=404, detail=ErrorMessages.FEATURES_NOT_FOUND)

    require_team_member(
        db, source.team_id, user, ErrorMessages.FEATURE_NOT_FOUND_OR_NO_ACCESS, status_code=404
    )

    if source.team_id != target.team_id:
        raise HTTPException(status_code=400, detail=ErrorMessages.DIFFERENT_TEAMS)

    if _edge_exists(db, source.id, target.id, dependency_type):
        raise HTTPException(status_code=400, detail=ErrorMessages.DEPENDENCY_EXISTS)

    inverse_type = DependencyTypes.CONFIG[dependency_type]["inverse"]
    if inverse_type and _edge_exists(db, target.id, source.id, inverse_type):
        raise HTTPException(
            status_code=400,
            detail=ErrorMessages.INVERSE_DEPENDENCY_EXISTS.format(
                label=DependencyTypes.CONFIG[inverse_type]["label"]
            )
        )

    # A -> B and B -> A of the same ordering type is a two-node cycle
    if dependency_type in DependencyTypes.ACYCLIC_TYPES and _edge_exists(db, target.id, source.id, dependency_type):
        raise HTTPException(status_code=400, detail=ErrorMessages.CIRCULAR_DEPENDENCY)

    dependency = FeatureDependency(
        source_feature_id=source.id,
        target_feature_id=target.id,
        dependency_type=dependency_type,
        description=description,
        created_by=user.id
    )
    db.add(dependency)

    if inverse_type:
        db.add(FeatureDependency(
            source_feature_id=target.id,
            target_feature_id=source.id,
            dependency_type=inverse_type,
            description=f"Inverse of: {description or 'No description'}",
            created_by=user.id
        ))

    db.commit()

    logger.info(
        f"Dependency {dependency.id}: feature {source.id} {dependency_type} feature {target.id} "
        f"(user {user.id})"
    )
    return dependency_to_dict(_load_edge(db, dependency.id))

def delete_dependency(db: Session, source_feature_id: int, dependency_id: int, user: User):
    """
    Deletes an edge together with its inverse.

    Raises:
        HTTPException: 404 when no edge with this id starts at the feature,
            or the user cannot see the feature
    """
    dependency = db.query(FeatureDependency).filter(
        FeatureDependency.id == dependency_id,
        FeatureDependency.source_feature_id == source_feature_id
    ).first()
    if not dependency:
        raise HTTPException(status_code=404, detail=ErrorMessages.DEPENDENCY_NOT_FOUND)

    source = db.query(Feature).filter(Feature.id == source_feature_id).first()
    require_team_member(
        db, source.team_id, user, ErrorMessages.FEATURE_NOT_FOUND_OR_NO_ACCESS, status_code=404
    )

    inverse_type = DependencyTypes.CONFIG[dependency.dependency_type]["inverse"]
    if inverse_type:
        inverse = db.query(FeatureDependency).filter(
            FeatureDependency.source_feature_id == dependency.target_feature_id,
            FeatureDependency.target_feature_id == dependency.source_feature_id,
            FeatureDependency.dependency_type == inverse_type
        ).first()
        if inverse:
            db.delete(inverse)

    db.delete(dependency)
    db.commit()

    logger.info(f"Dependency {dependency_id} and its inverse deleted by user {user.id}")
    return True

def _is_blocked(incoming) -> bool:
    return any(
        d.dependency_type in DependencyTypes.BLOCKING_TYPES
        and d.source_feature is not None
        and d.source_feature.status != FeatureStatus.DONE
        for d in incoming
    )

def get_feature_dependencies(db: Session, feature_id: int, user: User):
    """
    Returns the outgoing and incoming edges of a feature with summary stats.

    ``is_blocked`` is true while any feature that blocks this one, or that
    this one is a dependency of, is not done.
    """
    feature = db.query(Feature).filter(Feature.id == feature_id).first()
    if not feature or not get_membership(db, feature.team_id, user.id):
        raise HTTPException(status_code=404, detail=ErrorMessages.FEATURE_NOT_FOUND_OR_NO_ACCESS)

    outgoing = db.query(FeatureDependency).options(
        joinedload(FeatureDependency.target_feature),
        joinedload(FeatureDependency.creator)
    ).filter(
        FeatureDependency.source_feature_id == feature.id
    ).order_by(FeatureDependency.created_at.desc(), FeatureDependency.id.desc()).all()

    incoming = db.query(FeatureDependency).options(
        joinedload(FeatureDependency.source_feature),
        joinedload(FeatureDependency.creator)
    ).filter(
        FeatureDependency.target_feature_id == feature.id
    ).order_by(FeatureDependency.created_at.desc(), FeatureDependency.id.desc()).all()

    def _count(edges, dependency_type):
        return sum(1 for d in edges if d.dependency_type == dependency_type)

    stats = {
        "total_outgoing": len(outgoing),
        "total_incoming": len(incoming),
        "blocking_count": _count(outgoing, DependencyTypes.BLOCKS),
        "blocked_by_count": _count(incoming, DependencyTypes.BLOCKS),
        "depends_on_count": _count(outgoing, DependencyTypes.DEPENDS_ON),
        "related_count": _count(outgoing, DependencyTypes.RELATES_TO) + _count(incoming, DependencyTypes.RELATES_TO),
    }

    return {
        "feature": feature_summary(feature),
        "outgoing": [dependency_to_dict(d) for d in outgoing],
        "incoming": [dependency_to_dict(d) for d in incoming],
        "stats": stats,
        "is_blocked": _is_blocked(incoming),
    }

def get_team_dependencies(db: Session, team_id: int, user: User):
    """
    Lists every edge that starts at one of the team's features.
    """
    require_team_member(db, team_id, user, ErrorMessages.TEAM_NOT_FOUND_OR_NO_ACCESS, status_code=404)

    dependencies = db.query(FeatureDependency).join(
        Feature, FeatureDependency.source_feature_id == Feature.id
    ).options(
        joinedload(FeatureDependency.source_feature),
        joinedload(FeatureDependency.target_feature),
        joinedload(FeatureDependency.creator)
    ).filter(
        Feature.team_id == team_id
    ).order_by(FeatureDependency.created_at.desc(), FeatureDependency.id.desc()).all()

    by_type = {t: 0 for t in DependencyTypes.ALL_TYPES}
    blocked = set()
    for d in dependencies:
        by_type[d.dependency_type] = by_type.get(d.dependency_type, 0) + 1
        if (d.dependency_type == DependencyTypes.BLOCKED_BY
                and d.target_feature is not None
                and d.target_feature.status != FeatureStatus.DONE):
            blocked.add(d.source_feature_id)

    return {
        "dependencies": [dependency_to_dict(d) for d in dependencies],
        "stats": {
            "total": len(dependencies),
            "by_type": by_type,
            "blocked_features": len(blocked),
        },
    }
