"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "mdq": {
        "base_url": "https://mdq.incommon.org",
        "timeout": 10.0,
        # No trusted certificate by default - responses are not verified
        "signing_cert_path": None,
        "use_sha1_lookup": False,
    },
    "cache": {
        "enabled": True,
        "max_entries": 1000,
        # One hour
        "ttl_seconds": 3600.0,
    },
    "transport": {
        "verify_tls": True,
        "ca_bundle": None,
        "max_connections": 10,
    },
    "logging": {
        "level": "INFO",
        "log_file": None,
    },
}

DEFAULT_CONFIG_PATH = "config/config.json"
