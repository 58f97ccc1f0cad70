"""Constants for the OnePassword Item Operator."""

# API Group
API_GROUP = "onepassword.com"
API_VERSION = "v1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_ONEPASSWORD_ITEM = "OnePasswordItem"
PLURAL_ONEPASSWORD_ITEMS = "onepassworditems"

# Annotations
ANNOTATION_PREFIX = "operator.1password.io"
ANNOTATION_AUTO_RESTART = f"{ANNOTATION_PREFIX}/auto-restart"
ANNOTATION_ITEM_PATH = f"{ANNOTATION_PREFIX}/item-path"
ANNOTATION_ITEM_VERSION = f"{ANNOTATION_PREFIX}/item-version"

# Finalizers
FINALIZER = "onepassword.com/finalizer.secret"

# Field Manager
FIELD_MANAGER = "onepassword-item-operator"

# Secrets
DEFAULT_SECRET_TYPE = "Opaque"

# Condition Types
COND_READY = "Ready"

# Condition Statuses
STATUS_TRUE = "True"
STATUS_FALSE = "False"
STATUS_UNKNOWN = "Unknown"

# Event Reasons
EVENT_REASON_ITEM_SYNCED = "ItemSynced"
EVENT_REASON_ITEM_SYNC_FAILED = "ItemSyncFailed"
EVENT_REASON_SECRET_DELETED = "SecretDeleted"
