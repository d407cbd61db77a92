from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.models import User
from featureforge.config.settings import settings
from featureforge.constants import ErrorMessages

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
):
    """
    Dependency to get the current authenticated user from JWT token.

    Args:
        credentials: Bearer token credentials
        db: Database session

    Returns:
        User: The authenticated user instance

    Raises:
        HTTPException: If token is missing or invalid, or user not found
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail=ErrorMessages.NOT_AUTHENTICATED)

    token = credentials.credentials
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id = payload.get("user_id")
        if not user_id:
            raise HTTPException(status_code=401, detail=ErrorMessages.NOT_AUTHENTICATED)
    except JWTError:
        raise HTTPException(status_code=401, detail=ErrorMessages.NOT_AUTHENTICATED)

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=401, detail=ErrorMessages.NOT_AUTHENTICATED)

    return user


def require_role(role: str):
    """
    Dependency factory to require a specific platform role.

    Args:
        role: The role to require (e.g. 'admin')
    """
    def checker(user: User = Depends(get_current_user)):
        if user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions"
            )
        return user
    return checker
