"""
Role utility functions for mapping role levels to labels
"""
from app.constants import ROLE_LEVELS

_LABELS = {level: name for name, level in ROLE_LEVELS.items()}


def role_name(level):
    """
    Map a role level to its role name

    Args:
        level: Integer role level (1000, 700, 600, 300, 100)

    Returns:
        str: e.g. "HOD", or "Unknown" for unrecognised levels
    """
    return _LABELS.get(level, "Unknown")


def role_display_name(level):
    """Human readable role name, e.g. "Super Admin" """
    name = role_name(level)
    if name in ("HOD", "Unknown"):
        return name
    return name.replace("_", " ").title()
