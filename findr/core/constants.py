"""Global constants for the Findr backend."""

# Collection names
SWEEPSTAKES_COLLECTION = "sweepstakes"
USERS_COLLECTION = "users"
POSTS_COLLECTION = "posts"

# Sweepstake fields
SWEEPSTAKE_END_DATE = "endDate"
SWEEPSTAKE_IS_COMPLETED = "isCompleted"
SWEEPSTAKE_IS_PROCESSING = "isProcessing"
SWEEPSTAKE_PROCESSING_STARTED_AT = "processingStartedAt"
SWEEPSTAKE_COMPLETED_AT = "completedAt"
SWEEPSTAKE_ENTERED_USERS = "enteredUsers"
SWEEPSTAKE_WINNER = "winner"
SWEEPSTAKE_TITLE = "title"

# User fields
USER_FCM_TOKEN = "fcmToken"  # nosec B105
USER_WINS = "wins"
USER_USERNAME = "username"
USER_MATCHED_POSTS = "matchedPosts"
USER_FOLLOWING_POSTS = "followingPosts"

# Post fields
POST_POSTER = "poster"
POST_CITY = "city"
POST_UNFAIRNESS = "unfairness"
POST_INAPPROPRIATE_COUNT = "inappropriateCount"
POST_INAPPROPRIATE_COUNT_LEGACY = "inapropriateCount"
POST_REMOVED_AT = "removedAt"

# Moderation thresholds
UNFAIRNESS_THRESHOLD = 6
INAPPROPRIATE_THRESHOLD = 3
REASON_UNFAIR = "unfair"
REASON_INAPPROPRIATE = "inappropriate"

# Messaging
ADMIN_ALERT_TOPIC = "admin_alerts"

# Scheduler
DEFAULT_CLAIM_TIMEOUT_MINUTES = 30
