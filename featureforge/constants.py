class ErrorMessages:
    TEAM_NOT_FOUND = "Team not found"
    TEAM_NOT_FOUND_OR_NO_ACCESS = "Team not found or you do not have access"
    FEATURE_NOT_FOUND = "Feature not found"
    FEATURE_NOT_FOUND_OR_NO_ACCESS = "Feature not found or you do not have access"
    FEATURES_NOT_FOUND = "One or both features not found"
    PARENT_FEATURE_NOT_FOUND = "Parent feature not found"
    DEPENDENCY_NOT_FOUND = "Dependency not found"
    COMMENT_NOT_FOUND = "Comment not found"
    PARENT_COMMENT_NOT_FOUND = "Parent comment not found"
    NOTIFICATION_NOT_FOUND = "Notification not found"
    MEMBER_NOT_FOUND = "Team member not found"

    # Auth
    INVALID_CREDENTIALS = "Invalid email or password"
    EMAIL_EXISTS = "Email already registered"
    INVALID_ROLE = "Invalid role"
    NOT_AUTHENTICATED = "Not authenticated"

    # Teams
    NOT_AUTHORIZED_UPDATE_TEAM = "Not authorized to update team"
    NOT_AUTHORIZED_DELETE_TEAM = "Not authorized to delete team"
    NOT_AUTHORIZED_TEAM_SETTINGS = "Not authorized to view team settings"
    NOT_AUTHORIZED_VIEW_TEAM = "Not authorized to view this team"
    NOT_AUTHORIZED_VIEW_MEMBERS = "You do not have permission to view team members"
    NOT_AUTHORIZED_ADD_MEMBERS = "Not authorized to add team members"
    NOT_AUTHORIZED_REMOVE_MEMBERS = "Not authorized to remove team members"
    NOT_AUTHORIZED_UPDATE_ROLES = "Not authorized to update member roles"
    ALREADY_MEMBER = "User is already a team member"
    TEAM_SIZE_EXCEEDED = "Team size limit exceeded"
    USER_TEAM_LIMIT = "User cannot be a member of more than {limit} teams"
    EMAIL_REQUIRED = "Email is required"

    # Features
    NOT_AUTHORIZED_VIEW_FEATURES = "Not authorized to view team features"
    NOT_AUTHORIZED_CREATE_FEATURE = "Not authorized to create features for this team"
    NOT_AUTHORIZED_UPDATE_FEATURE = "Not authorized to update team features"
    NOT_AUTHORIZED_CHANGE_STATUS = "Not authorized to change feature status"
    NOT_AUTHORIZED_DELETE_FEATURE = "Not authorized to delete team features"
    NOT_AUTHORIZED_TEAM_STATS = "Not authorized to view team statistics"
    TITLE_REQUIRED = "Feature title is required"
    TITLE_TOO_LONG = "Feature title cannot be longer than {limit} characters"
    ASSIGNEE_NOT_MEMBER = "Assignee must be a member of the team"
    INVALID_FEATURE_TYPE = "Invalid feature type"
    INVALID_PRIORITY = "Invalid priority"
    PARENT_DIFFERENT_TEAM = "Parent feature must belong to the same team"
    SELF_PARENT = "A feature cannot be its own parent"
    CIRCULAR_HIERARCHY = "Circular hierarchy detected"
    MAX_DEPTH_EXCEEDED = "Feature hierarchy cannot be deeper than {depth} levels"
    HAS_CHILDREN_TYPE = "Features with children must remain parent features"

    # Dependencies
    DEPENDENCY_FIELDS_REQUIRED = "Target feature ID and dependency type are required"
    INVALID_DEPENDENCY_TYPE = "Invalid dependency type"
    SELF_DEPENDENCY = "A feature cannot depend on itself"
    DIFFERENT_TEAMS = "Dependencies can only be created between features in the same team"
    DEPENDENCY_EXISTS = "This dependency already exists"
    INVERSE_DEPENDENCY_EXISTS = 'This dependency already exists as a "{label}" relationship'
    CIRCULAR_DEPENDENCY = "Creating this dependency would result in a circular dependency"
    DESCRIPTION_TOO_LONG = "Description cannot be longer than {limit} characters"

    # Comments
    CONTENT_REQUIRED = "Comment content is required"
    CONTENT_TOO_LONG = "Comment cannot be longer than {limit} characters"
    NOT_AUTHORIZED_EDIT_COMMENT = "Not authorized to edit this comment"
    NOT_AUTHORIZED_DELETE_COMMENT = "Not authorized to delete this comment"

    SERVER_ERROR = "Server Error"
    DATABASE_UNAVAILABLE = "Database is not available"

class SuccessMessages:
    TEAM_DELETED = "Team deleted successfully"
    MEMBER_REMOVED = "Team member removed successfully"
    FEATURE_DELETED = "Feature deleted successfully"
    DEPENDENCY_DELETED = "Dependency deleted successfully"
    COMMENT_DELETED = "Comment deleted successfully"
    NOTIFICATION_DELETED = "Notification deleted successfully"
    MEMBER_ADDED = "{email} has been added to the team."
    MEMBER_INVITED = "Invitation sent to {email}. They will receive an email with instructions to join."

class Roles:
    """Platform-wide user roles."""
    USER = "user"
    ADMIN = "admin"
    PRODUCT_MANAGER = "product-manager"
    ALL_ROLES = [USER, ADMIN, PRODUCT_MANAGER]

class TeamRoles:
    ADMIN = "admin"
    USER = "user"
    PRODUCT_OWNER = "product-owner"
    ALL_ROLES = [ADMIN, USER, PRODUCT_OWNER]
    # Roles allowed to change feature status and delete features
    FEATURE_MANAGERS = [ADMIN, PRODUCT_OWNER]

class FeatureTypes:
    PARENT = "parent"
    STORY = "story"
    TASK = "task"
    RESEARCH = "research"
    ALL_TYPES = [PARENT, STORY, TASK, RESEARCH]

    LABELS = {
        PARENT: "Parent",
        STORY: "Story",
        TASK: "Task",
        RESEARCH: "Research",
    }

class HierarchyRules:
    CAN_HAVE_CHILDREN = [FeatureTypes.PARENT]
    CAN_BE_CHILDREN = [FeatureTypes.STORY, FeatureTypes.TASK, FeatureTypes.RESEARCH]
    MAX_DEPTH = 2

class FeatureStatus:
    BACKLOG = "backlog"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"
    ALL_STATUSES = [BACKLOG, IN_PROGRESS, REVIEW, DONE]

    # Spellings older clients still send
    ALIASES = {
        "planned": BACKLOG,
        "requested": BACKLOG,
        "in-progress": IN_PROGRESS,
        "inprogress": IN_PROGRESS,
        "in-review": REVIEW,
        "inreview": REVIEW,
        "completed": DONE,
        "cancelled": DONE,
    }

class Priority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
    ALL_PRIORITIES = [LOW, MEDIUM, HIGH, CRITICAL]
    ALIASES = {"urgent": CRITICAL}

class DependencyTypes:
    BLOCKS = "blocks"
    BLOCKED_BY = "blocked_by"
    DEPENDS_ON = "depends_on"
    RELATES_TO = "relates_to"

    CONFIG = {
        BLOCKS: {
            "label": "Blocks",
            "description": "This feature blocks the target feature",
            "inverse": BLOCKED_BY,
        },
        BLOCKED_BY: {
            "label": "Blocked by",
            "description": "This feature is blocked by the target feature",
            "inverse": BLOCKS,
        },
        DEPENDS_ON: {
            "label": "Depends on",
            "description": "This feature depends on the target feature",
            "inverse": None,
        },
        RELATES_TO: {
            "label": "Relates to",
            "description": "This feature is related to the target feature",
            "inverse": RELATES_TO,
        },
    }

    ALL_TYPES = list(CONFIG)
    # Incoming edges of these types block the target until the source is done
    BLOCKING_TYPES = [BLOCKS, DEPENDS_ON]
    # Types that may not point both ways between the same pair
    ACYCLIC_TYPES = [BLOCKS, BLOCKED_BY, DEPENDS_ON]

class NotificationTypes:
    MENTION = "mention"
    REPLY = "reply"
    FEATURE_UPDATE = "feature_update"
    ALL_TYPES = [MENTION, REPLY, FEATURE_UPDATE]

class RelatedTypes:
    COMMENT = "comment"
    FEATURE = "feature"

COMMENT_MAX_LENGTH = 2000
DEPENDENCY_DESCRIPTION_MAX_LENGTH = 500
FEATURE_TITLE_MAX_LENGTH = 100
