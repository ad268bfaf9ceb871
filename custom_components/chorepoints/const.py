"""Constants for the ChorePoints integration."""
DOMAIN = "chorepoints"
PLATFORMS = ["sensor", "todo"]

CONF_ROLES = "roles"
CONF_USE_TODO = "use_todo"
# Set once the configured role names have been created
CONF_ROLES_SEEDED = "roles_seeded"

STORAGE_KEY = f"{DOMAIN}_data"
STORAGE_VERSION = 1

SIGNAL_DOCUMENT_UPDATED = f"{DOMAIN}_document_updated"

# Midnight rollover, a few seconds past so local "today" has already advanced
DAILY_ROLLOVER_TIME = {"hour": 0, "minute": 0, "second": 5}

REPEAT_DAILY = "daily"
REPEAT_WEEKLY = "weekly"
REPEAT_TYPES = [REPEAT_DAILY, REPEAT_WEEKLY]

PRIORITY_HIGH = "high"
PRIORITY_MEDIUM = "medium"
PRIORITY_LOW = "low"
PRIORITIES = [PRIORITY_HIGH, PRIORITY_MEDIUM, PRIORITY_LOW]

# Services
SERVICE_ADD_ROLE = "add_role"
SERVICE_DELETE_ROLE = "delete_role"
SERVICE_ADD_TASK = "add_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_ADD_REWARD = "add_reward"
SERVICE_DELETE_REWARD = "delete_reward"
SERVICE_COMPLETE_TASK = "complete_task"
SERVICE_REDEEM_REWARD = "redeem_reward"
SERVICE_RECONCILE_DAY = "reconcile_day"
SERVICE_IMPORT_DATA = "import_data"

SERVICES = [
    SERVICE_ADD_ROLE,
    SERVICE_DELETE_ROLE,
    SERVICE_ADD_TASK,
    SERVICE_UPDATE_TASK,
    SERVICE_DELETE_TASK,
    SERVICE_ADD_REWARD,
    SERVICE_DELETE_REWARD,
    SERVICE_COMPLETE_TASK,
    SERVICE_REDEEM_REWARD,
    SERVICE_RECONCILE_DAY,
    SERVICE_IMPORT_DATA,
]
