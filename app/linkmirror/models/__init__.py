"""Data models for linkmirror.

This module exports the action log structures shared by the sync engine
and the CLI.
"""

from linkmirror.models.action import (
    MUTATING_ACTIONS,
    NOOP_ACTIONS,
    ActionListener,
    ActionLog,
    ActionType,
    SyncAction,
)

__all__ = [
    "MUTATING_ACTIONS",
    "NOOP_ACTIONS",
    "ActionListener",
    "ActionLog",
    "ActionType",
    "SyncAction",
]
