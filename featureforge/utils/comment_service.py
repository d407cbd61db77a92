import logging
import re
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from featureforge.auth.permissions import require_team_member
from featureforge.constants import ErrorMessages, NotificationTypes, RelatedTypes, COMMENT_MAX_LENGTH
from featureforge.models import Comment, Feature, TeamMember, User
from featureforge.utils.notification_service import create_notification
from featureforge.utils.common import get_object_or_404
from featureforge.utils.utils import comment_to_dict
from featureforge.utils.feature_service import get_accessible_feature

logger = logging.getLogger(__name__)

MENTION_PATTERN = re.compile(r"@([\w.-]+)")

def parse_mention_tokens(content: Optional[str]) -> List[str]:
    """
    Extracts @name tokens in order of first appearance, without duplicates.
    """
    tokens = []
    for token in MENTION_PATTERN.findall(content or ""):
        if token not in tokens:
            tokens.append(token)
    return tokens

def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

def parse_mentions(db: Session, content: Optional[str], team_id: int) -> List[dict]:
    """
    Resolves @name tokens to team members.

    A member matches when their display name contains any token,
    case-insensitively. Tokens are matched literally, so `_` and `%`
    are not wildcards.

    Returns:
        list: {user_id, username, email} for each matched member
    """
    tokens = parse_mention_tokens(content)
    if not tokens:
        return []

    users = (
        db.query(User)
        .join(TeamMember, TeamMember.user_id == User.id)
        .filter(TeamMember.team_id == team_id)
        .filter(or_(*[User.name.ilike(_like_pattern(token), escape="\\") for token in tokens]))
        .order_by(User.id.asc())
        .all()
    )
    return [{"user_id": u.id, "username": u.name, "email": u.email} for u in users]

def _validate_content(content: Optional[str]) -> str:
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=400, detail=ErrorMessages.CONTENT_REQUIRED)
    if len(content) > COMMENT_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=ErrorMessages.CONTENT_TOO_LONG.format(limit=COMMENT_MAX_LENGTH)
        )
    return content

def _notify_mentions(db: Session, mentions: List[dict], comment: Comment, author: User):
    for mention in mentions:
        if mention["user_id"] == author.id:
            continue
        create_notification(
            db,
            user_id=mention["user_id"],
            type=NotificationTypes.MENTION,
            related_id=comment.id,
            related_type=RelatedTypes.COMMENT,
            message=f"{author.name} mentioned you in a comment",
            triggered_by=author.id,
            metadata={
                "feature_id": comment.feature_id,
                "comment_id": comment.id,
                "mentioned_username": mention["username"],
            },
            commit=False
        )

def _load_comment(db: Session, comment_id: int) -> Optional[Comment]:
    return db.query(Comment).options(joinedload(Comment.author)).filter(Comment.id == comment_id).first()

def create_comment(db: Session, feature_id: int, user: User, content: Optional[str], parent_id: Optional[int] = None):
    """
    Adds a comment or reply to a feature and notifies mentioned members.

    Args:
        db: Database session
        feature_id: Feature being discussed
        user: Author
        content: Comment text, 1 to 2000 characters after trimming
        parent_id: Comment being replied to, on the same feature

    Returns:
        dict: The created comment

    Raises:
        HTTPException: 400 invalid content, 404 unknown feature or parent
    """
    content = _validate_content(content)
    feature = get_accessible_feature(db, feature_id, user)

    parent = None
    if parent_id:
        parent = db.query(Comment).filter(
            Comment.id == parent_id,
            Comment.feature_id == feature.id
        ).first()
        if not parent:
            raise HTTPException(status_code=404, detail=ErrorMessages.PARENT_COMMENT_NOT_FOUND)

    mentions = parse_mentions(db, content, feature.team_id)

    comment = Comment(
        feature_id=feature.id,
        user_id=user.id,
        content=content,
        parent_id=parent.id if parent else None,
        mentions=mentions
    )
    db.add(comment)
    db.flush()

    _notify_mentions(db, mentions, comment, user)

    if parent and parent.user_id != user.id:
        create_notification(
            db,
            user_id=parent.user_id,
            type=NotificationTypes.REPLY,
            related_id=comment.id,
            related_type=RelatedTypes.COMMENT,
            message=f"{user.name} replied to your comment",
            triggered_by=user.id,
            metadata={
                "feature_id": feature.id,
                "comment_id": comment.id,
                "parent_comment_id": parent.id,
            },
            commit=False
        )

    db.commit()
    logger.info(f"Comment {comment.id} added to feature {feature.id} by user {user.id} ({len(mentions)} mentions)")
    return comment_to_dict(_load_comment(db, comment.id))

def update_comment(db: Session, comment_id: int, user: User, content: Optional[str]):
    """
    Edits a comment. Only the author may edit; members newly mentioned by the
    edit are notified, those already mentioned are not notified again.
    """
    comment = get_object_or_404(db, Comment, comment_id, ErrorMessages.COMMENT_NOT_FOUND)
    if comment.user_id != user.id:
        raise HTTPException(status_code=403, detail=ErrorMessages.NOT_AUTHORIZED_EDIT_COMMENT)

    content = _validate_content(content)
    team_id = db.query(Feature.team_id).filter(Feature.id == comment.feature_id).scalar()

    previous = {m["user_id"] for m in (comment.mentions or [])}
    mentions = parse_mentions(db, content, team_id)

    comment.content = content
    comment.mentions = mentions
    comment.is_edited = True
    comment.edited_at = datetime.utcnow()

    _notify_mentions(db, [m for m in mentions if m["user_id"] not in previous], comment, user)

    db.commit()
    return comment_to_dict(_load_comment(db, comment.id))

def delete_comment(db: Session, comment_id: int, user: User):
    comment = get_object_or_404(db, Comment, comment_id, ErrorMessages.COMMENT_NOT_FOUND)
    if comment.user_id != user.id:
        raise HTTPException(status_code=403, detail=ErrorMessages.NOT_AUTHORIZED_DELETE_COMMENT)

    db.delete(comment)
    db.commit()
    return True

def build_comment_tree(comments: List[Comment]) -> List[dict]:
    """
    Threads a flat, creation-ordered list into root comments with nested replies.

    Replies whose parent is not in the list are dropped.
    """
    nodes = {}
    for c in comments:
        node = comment_to_dict(c)
        node["replies"] = []
        nodes[c.id] = node

    roots = []
    for c in comments:
        node = nodes[c.id]
        if c.parent_id is None:
            roots.append(node)
        elif c.parent_id in nodes:
            nodes[c.parent_id]["replies"].append(node)
    return roots

def get_comments_for_feature(db: Session, feature_id: int, user: User):
    feature = get_accessible_feature(db, feature_id, user)

    comments = (
        db.query(Comment)
        .options(joinedload(Comment.author))
        .filter(Comment.feature_id == feature.id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return build_comment_tree(comments)

def get_team_members_for_mentions(db: Session, team_id: int, user: User, q: Optional[str] = None):
    """
    Autocomplete source for @mentions.
    """
    require_team_member(db, team_id, user, ErrorMessages.TEAM_NOT_FOUND_OR_NO_ACCESS, status_code=404)

    query = (
        db.query(User)
        .join(TeamMember, TeamMember.user_id == User.id)
        .filter(TeamMember.team_id == team_id)
    )
    if q:
        query = query.filter(User.name.ilike(_like_pattern(q), escape="\\"))

    return [{"id": u.id, "name": u.name, "email": u.email} for u in query.order_by(User.name.asc()).all()]
