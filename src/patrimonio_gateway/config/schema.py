"""
JSON schemas for configuration validation.
"""

SERVER_SCHEMA = {
    "type": "object",
    "properties": {
        "host": {"type": "string"},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "public_dir": {"type": "string"},
        "index_file": {"type": "string", "minLength": 1},
    },
    "additionalProperties": False,
}

IDENTITY_SCHEMA = {
    "type": "object",
    "properties": {
        "wallet_dir": {"type": "string"},
        "label": {"type": "string", "minLength": 1},
        "msp_id": {"type": "string", "minLength": 1},
        "cert_path": {"type": "string"},
        "key_path": {"type": "string"},
    },
    "additionalProperties": False,
}

LEDGER_SCHEMA = {
    "type": "object",
    "properties": {
        "connection_profile": {"type": "string"},
        "channel": {"type": "string", "minLength": 1},
        "chaincode": {"type": "string", "minLength": 1},
        "discovery_enabled": {"type": "boolean"},
        "identity": IDENTITY_SCHEMA,
    },
    "additionalProperties": False,
}

LOGGING_SCHEMA = {
    "type": "object",
    "properties": {
        "level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]},
        "format": {"type": "string", "enum": ["text", "json"]},
        "access_log": {"type": "boolean"},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "server": SERVER_SCHEMA,
        "ledger": LEDGER_SCHEMA,
        "logging": LOGGING_SCHEMA,
    },
    "additionalProperties": False,
}
