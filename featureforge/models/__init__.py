from featureforge.models.user import User, Notification
from featureforge.models.team import Team, TeamMember
from featureforge.models.feature import Feature, FeatureDependency
from featureforge.models.comment import Comment

# Export everything for easy access
__all__ = [
    "User",
    "Notification",
    "Team",
    "TeamMember",
    "Feature",
    "FeatureDependency",
    "Comment",
]
