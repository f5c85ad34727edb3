"""Centralized settings utilities."""

from __future__ import annotations

import os

from navproof.config import (
    DEFAULT_FILE_TEMPLATES,
    DEFAULT_PATH_TEMPLATES,
    Settings,
    load_settings,
)


def safe_load_settings() -> Settings | None:
    """
    Load settings with graceful fallback.

    If .env is unreadable (e.g., sandbox), construct Settings directly from environment variables.
    Returns None if settings cannot be constructed.
    """
    try:
        return load_settings()
    except Exception:
        try:
            return Settings.model_construct(
                REGISTRY_RPC_URL=os.getenv("REGISTRY_RPC_URL"),
                REGISTRY_ADDRESS=os.getenv("REGISTRY_ADDRESS"),
                SNAPSHOT_API_URL=os.getenv("SNAPSHOT_API_URL", "http://127.0.0.1:8000/snapshots"),
                GATEWAY_FILE_TEMPLATES=os.getenv("GATEWAY_FILE_TEMPLATES", DEFAULT_FILE_TEMPLATES),
                GATEWAY_PATH_TEMPLATES=os.getenv("GATEWAY_PATH_TEMPLATES", DEFAULT_PATH_TEMPLATES),
                GATEWAY_TIMEOUT_SECONDS=float(os.getenv("GATEWAY_TIMEOUT_SECONDS", "15")),
                SNAPSHOT_MAX_ATTEMPTS=int(os.getenv("SNAPSHOT_MAX_ATTEMPTS", "3")),
                REPORTING_TZ=os.getenv("REPORTING_TZ", "America/New_York"),
            )
        except Exception:
            return None
