"""Constants used throughout the notification service application."""

# HTTP Headers
REQUEST_ID_HEADER = "X-Request-ID"

# Synthetic key added to every message data payload
MESSAGE_ID_DATA_KEY = "message_id"

# Notes recorded on queue items finished without a push
QUEUE_NOTE_MUTED = "muted"
QUEUE_NOTE_NO_TOKENS = "no-tokens"
QUEUE_NOTE_TOKENS_REMOVED = "tokens-removed"

# Inbox listing defaults
DEFAULT_MESSAGES_LIMIT = 20
MAX_MESSAGES_LIMIT = 100

# Google OAuth2 scope for Firebase Cloud Messaging
FCM_SCOPES = ["https://www.googleapis.com/auth/firebase.messaging"]

# Data keys FCM reserves for itself
FCM_RESERVED_DATA_KEYS = frozenset({"from", "notification", "message_type"})
FCM_RESERVED_DATA_PREFIXES = ("google", "gcm")

# Latest representable send time, 9999-12-31T23:59:59Z
MAX_EPOCH_SECONDS = 253402300799
