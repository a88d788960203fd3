"""API v1 endpoints package."""

from . import (
    appointments,
    assistant,
    chats,
    doctors,
    files,
    health,
    hospitals,
    journals,
    moods,
    prescriptions,
    ratings,
    users,
)

__all__ = [
    "appointments",
    "assistant",
    "chats",
    "doctors",
    "files",
    "health",
    "hospitals",
    "journals",
    "moods",
    "prescriptions",
    "ratings",
    "users",
]
