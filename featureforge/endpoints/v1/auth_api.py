from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.models import User
from featureforge.auth.auth_utils import hash_password, verify_password, create_access_token
from featureforge.auth.dependencies import get_current_user
from featureforge.constants import ErrorMessages
from featureforge.schemas import LoginRequest, RegisterRequest
from featureforge.utils.common import success_response
from featureforge.utils.utils import user_to_dict

router = APIRouter(prefix="/auth", tags=["Auth"])

def _token_payload(user: User) -> dict:
    token = create_access_token({"user_id": user.id, "email": user.email})
    return {"access_token": token, "token_type": "bearer", "user": user_to_dict(user)}

@router.post("/register", status_code=201)
def register(
    request: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Registers a new user and returns an access token.
    """
    email = request.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail=ErrorMessages.EMAIL_EXISTS)

    user = User(
        name=request.name.strip(),
        email=email,
        hashed_password=hash_password(request.password)
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    return success_response(_token_payload(user))

@router.post("/login")
def login(
    request: LoginRequest,
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.email == request.email.strip().lower()).first()
    if not user or not verify_password(request.password, user.hashed_password):
        raise HTTPException(status_code=401, detail=ErrorMessages.INVALID_CREDENTIALS)

    return success_response(_token_payload(user))

@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return success_response(user_to_dict(current_user))
