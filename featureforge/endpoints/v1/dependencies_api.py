from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from featureforge.database.session import get_db
from featureforge.schemas import DependencyCreate
from featureforge.utils import dependency_service
from featureforge.utils.common import success_response
from featureforge.auth.dependencies import get_current_user
from featureforge.models import User
from featureforge.constants import SuccessMessages

router = APIRouter(prefix="/features", tags=["Dependencies"])

@router.get("/dependencies/types")
def get_dependency_types(current_user: User = Depends(get_current_user)):
    """
    Dependency types with their labels, descriptions and inverses.
    """
    return success_response(dependency_service.get_dependency_types())

@router.get("/{feature_id}/dependencies")
def get_feature_dependencies(
    feature_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(dependency_service.get_feature_dependencies(db, feature_id, current_user))

@router.post("/{feature_id}/dependencies", status_code=201)
def create_dependency(
    feature_id: int,
    dependency: DependencyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Links this feature to another one. Types with an inverse also get the
    mirrored edge from the target back to this feature.
    """
    created = dependency_service.create_dependency(
        db,
        feature_id,
        dependency.target_feature_id,
        dependency.dependency_type,
        dependency.description,
        current_user
    )
    return success_response(created)

@router.delete("/{feature_id}/dependencies/{dependency_id}")
def delete_dependency(
    feature_id: int,
    dependency_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    dependency_service.delete_dependency(db, feature_id, dependency_id, current_user)
    return success_response(message=SuccessMessages.DEPENDENCY_DELETED)
