from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.schemas import CommentCreate
from featureforge.utils import feature_service, comment_service
from featureforge.utils.common import success_response
from featureforge.auth.dependencies import get_current_user
from featureforge.models import User

router = APIRouter(prefix="/features", tags=["Features"])

@router.get("/{feature_id}")
def get_feature(
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.get_feature(db, feature_id, current_user))

@router.get("/{feature_id}/children")
def get_feature_children(
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.get_feature_children(db, feature_id, current_user))

@router.post("/{feature_id}/vote")
def vote_feature(
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(feature_service.vote_feature(db, feature_id, current_user))

# ---------------- COMMENTS ---------------- #

@router.get("/{feature_id}/comments")
def get_feature_comments(
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Threaded comments: root comments oldest first, each with nested replies.
    """
    return success_response(comment_service.get_comments_for_feature(db, feature_id, current_user))

@router.post("/{feature_id}/comments", status_code=201)
def create_feature_comment(
    feature_id: int,
    comment: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(
        comment_service.create_comment(db, feature_id, current_user, comment.content, comment.parent_id)
    )
