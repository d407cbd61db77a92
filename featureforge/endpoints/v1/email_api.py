from fastapi import APIRouter, Depends

from featureforge.auth.dependencies import require_role
from featureforge.constants import Roles
from featureforge.models import User
from featureforge.utils.common import success_response
from featureforge.utils.email_service import EmailAnalytics, get_email_analytics

router = APIRouter(prefix="/email", tags=["Email"])

@router.get("/analytics")
def get_analytics(
    analytics: EmailAnalytics = Depends(get_email_analytics),
    current_user: User = Depends(require_role(Roles.ADMIN))
):
    """
    Delivery counters per email template. Platform admins only.
    """
    return success_response(analytics.summary())
