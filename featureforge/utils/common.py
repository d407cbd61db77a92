from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session


def get_object_or_404(db: Session, model, object_id: int, detail: str):
    """
    Fetches a row by primary key or raises a 404 with the given message.
    """
    obj = db.query(model).filter(model.id == object_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail=detail)
    return obj

def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    """
    Wraps a payload in the API's success envelope.
    """
    body = {"success": True, "data": data if data is not None else {}}
    if message:
        body["message"] = message
    return body
