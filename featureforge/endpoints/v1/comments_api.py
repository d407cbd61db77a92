from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.schemas import CommentUpdate
from featureforge.utils import comment_service
from featureforge.utils.common import success_response
from featureforge.auth.dependencies import get_current_user
from featureforge.models import User
from featureforge.constants import SuccessMessages

router = APIRouter(prefix="/comments", tags=["Comments"])

@router.put("/{comment_id}")
def update_comment(
    comment_id: int,
    comment: CommentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Edits a comment. Authors only.
    """
    return success_response(comment_service.update_comment(db, comment_id, current_user, comment.content))

@router.delete("/{comment_id}")
def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    comment_service.delete_comment(db, comment_id, current_user)
    return success_response(message=SuccessMessages.COMMENT_DELETED)
