from fastapi import APIRouter
from featureforge.endpoints.v1 import (
    auth_api,
    teams_api,
    dependencies_api,
    features_api,
    comments_api,
    notifications_api,
    email_api
)

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_api.router)
api_router.include_router(teams_api.router)
# Before features_api so /features/dependencies/types is matched first
api_router.include_router(dependencies_api.router)
api_router.include_router(features_api.router)
api_router.include_router(comments_api.router)
api_router.include_router(notifications_api.router)
api_router.include_router(email_api.router)
