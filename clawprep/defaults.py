"""Settings the startup run writes into every configuration."""

from typing import Any

OLLAMA_PROVIDER = "ollama"

# Force-merged: the container only works with these.
GATEWAY_DEFAULTS: dict[str, Any] = {
    "gateway": {
        "mode": "local",
        "bind": "lan",
        "controlUi": {
            "allowInsecureAuth": True,
        },
        "auth": {
            "mode": "token",
        },
    },
}

# Preserve-merged: users may narrow or widen these.
AGENT_DEFAULTS: dict[str, Any] = {
    "agents": {
        "defaults": {
            "tools": {
                "profile": "standard",
                "allow": ["read", "write", "edit", "exec", "web", "browser"],
                "exec": {
                    "host": "gateway",
                    "ask": "off",
                    "security": "standard",
                },
            },
        },
    },
}
