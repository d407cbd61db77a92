from featureforge.constants import DependencyTypes

def _iso(value):
    return value.isoformat() if value else None

def user_summary(u):
    if not u: return None
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
    }

def user_to_dict(u):
    if not u: return None
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "created_at": _iso(u.created_at),
    }

def member_to_dict(m):
    """
    Flattens a TeamMember row and its user into one record.
    """
    return {
        "id": m.user.id,
        "user_id": m.user.id,
        "name": m.user.name,
        "email": m.user.email,
        "role": m.role,
        "joined_at": _iso(m.joined_at),
    }

def team_to_dict(t):
    if not t: return None
    return {
        "id": t.id,
        "name": t.name,
        "description": t.description,
        "created_by": t.created_by,
        "created_by_email": t.created_by_email,
        "created_at": _iso(t.created_at),
        "updated_at": _iso(t.updated_at),
    }

def feature_summary(f):
    if not f: return None
    return {
        "id": f.id,
        "title": f.title,
        "status": f.status,
        "priority": f.priority,
        "type": f.type,
        "team_id": f.team_id,
        "assignee": user_summary(f.assignee),
    }

def feature_to_dict(f):
    if not f: return None
    return {
        "id": f.id,
        "title": f.title,
        "description": f.description,
        "status": f.status,
        "priority": f.priority,
        "type": f.type,
        "parent_id": f.parent_id,
        "team_id": f.team_id,
        "created_by": f.created_by,
        "created_by_email": f.created_by_email,
        "creator": user_summary(f.creator),
        "assigned_to": f.assigned_to,
        "assignee": user_summary(f.assignee),
        "tags": f.tags or [],
        "due_date": str(f.due_date) if f.due_date else None,
        "votes": f.votes or 0,
        "impact": f.impact,
        "effort": f.effort,
        "category": f.category,
        "target_release": f.target_release,
        "created_at": _iso(f.created_at),
        "updated_at": _iso(f.updated_at),
    }

def dependency_to_dict(d):
    """
    Serializes an edge. ``inverse_type`` is the relationship as read from
    the target's side (None for types without an inverse).
    """
    if not d: return None
    return {
        "id": d.id,
        "source_feature_id": d.source_feature_id,
        "target_feature_id": d.target_feature_id,
        "dependency_type": d.dependency_type,
        "inverse_type": DependencyTypes.CONFIG[d.dependency_type]["inverse"],
        "description": d.description,
        "created_by": d.created_by,
        "creator": user_summary(d.creator),
        "source_feature": feature_summary(d.source_feature),
        "target_feature": feature_summary(d.target_feature),
        "created_at": _iso(d.created_at),
    }

def comment_to_dict(c):
    if not c: return None
    return {
        "id": c.id,
        "feature_id": c.feature_id,
        "user_id": c.user_id,
        "author": user_summary(c.author),
        "content": c.content,
        "parent_id": c.parent_id,
        "mentions": c.mentions or [],
        "is_edited": bool(c.is_edited),
        "edited_at": _iso(c.edited_at),
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }

def notification_to_dict(n):
    if not n: return None
    return {
        "id": n.id,
        "user_id": n.user_id,
        "type": n.type,
        "related_id": n.related_id,
        "related_type": n.related_type,
        "message": n.message,
        "is_read": bool(n.is_read),
        "triggered_by": n.triggered_by,
        "trigger": user_summary(n.trigger),
        "metadata": n.meta_data or {},
        "created_at": _iso(n.created_at),
    }
