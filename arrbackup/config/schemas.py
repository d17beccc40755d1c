"""JSON schemas for settings and server responses."""

SETTINGS_SCHEMA = {
    "type": "object",
    "properties": {
        "base_url": {
            "type": "string",
            "minLength": 1,
            "description": "Base URL of the server, e.g. http://sonarr:8989",
        },
        "api_key": {
            "type": "string",
            "minLength": 1,
        },
        "config_dir": {
            "type": "string",
            "minLength": 1,
            "description": "Server configuration directory containing Backups/manual",
        },
        "dest_dir": {
            "type": "string",
            "minLength": 1,
            "description": "Empty directory the backup is extracted into",
        },
        "delete_backup": {"type": "boolean"},
        "max_age": {
            "type": "number",
            "exclusiveMinimum": 0,
            "description": "Maximum age in seconds of a reusable manual backup",
        },
        "request_timeout": {
            "type": "number",
            "exclusiveMinimum": 0,
        },
    },
    "required": ["base_url", "api_key", "config_dir", "dest_dir"],
    "additionalProperties": False,
}

BACKUP_RECORD_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "integer", "minimum": 0},
        "name": {"type": "string", "minLength": 1},
        "time": {"type": "string", "minLength": 1},
        "type": {
            "type": "string",
            "enum": ["manual", "scheduled", "update"],
        },
        "path": {"type": "string"},
        "size": {"type": "integer"},
    },
    "required": ["id", "name", "time", "type"],
}

BACKUP_LIST_SCHEMA = {
    "type": "array",
    "items": {"type": "object"},
}

# Environment variable backing each setting
SETTING_ENV_VARS = {
    "base_url": "ARR_URL",
    "api_key": "ARR_API_KEY",
    "config_dir": "ARR_CONFIG_DIR",
    "dest_dir": "ARR_DEST_DIR",
    "delete_backup": "ARR_DELETE_BACKUP",
    "max_age": "ARR_MAX_AGE",
    "request_timeout": "ARR_REQUEST_TIMEOUT",
}
