from __future__ import annotations

"""
Configuration Domain Management.

Handles the persisted user preferences (the default value of each report
switch) stored as JSON in the user data directory. Supports migration of the
legacy flat layout and falls back to built-in defaults on any corruption.
"""

import json
import logging
import os
from typing import Any, Dict

from allocdu.domain.constants import CURRENT_CONFIG_VERSION
from allocdu.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(create=False), "config.json")


def get_default_config() -> Dict[str, Any]:
    """
    Generate the built-in runtime configuration.

    Returns:
        Dict[str, Any]: Default value of every report switch.
    """
    return {
        # Report content
        "show_files": False,
        "summary_only": False,
        "exact_bytes": False,

        # Hard-link deduplication
        "track_identity": False,
        "identity_scope": "target",

        # Traversal
        "follow_symlinks": False,

        # Presentation
        "color": "always",
    }


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default structure of config.json.

    Returns:
        Dict[str, Any]: The full JSON structure.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "defaults": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load the persisted state from disk.

    Handles the legacy flat schema automatically.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    default_state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{CONFIG_FILE}': {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    # Legacy layout: switches stored at the top level
    known_keys = set(default_state["defaults"])
    if "defaults" not in data and known_keys.intersection(data):
        logger.info("Migrating legacy config schema...")
        state = get_default_app_state()
        state["defaults"].update({k: v for k, v in data.items() if k in known_keys})
        save_app_state(state)
        return state

    state = default_state
    stored = data.get("defaults")
    if isinstance(stored, dict):
        state["defaults"].update(stored)
    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> bool:
    """
    Persist the state to disk.

    Args:
        state: The state dictionary to save.

    Returns:
        bool: True if the file was written.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
        return True
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> Dict[str, Any]:
    """
    Retrieve the effective defaults: built-ins overlaid with saved preferences.
    """
    state = load_app_state()
    config = get_default_config()
    config.update(state.get("defaults", {}))
    return config


def save_config(config: Dict[str, Any]) -> bool:
    """
    Save the report switches of the provided config as the new defaults.
    """
    known_keys = set(get_default_config())
    state = load_app_state()
    state["defaults"] = {k: v for k, v in config.items() if k in known_keys}
    return save_app_state(state)
