"""Models package - SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``.
"""
from .appointment import Appointment
from .chat import Chat, ChatMessage
from .doctor import Doctor
from .hospital import Hospital
from .journal import Journal, MoodEntry
from .prescription import Prescription
from .rating import Rating
from .stored_file import StoredFile, file_shares
from .user import User

__all__ = [
    "Appointment",
    "Chat",
    "ChatMessage",
    "Doctor",
    "Hospital",
    "Journal",
    "MoodEntry",
    "Prescription",
    "Rating",
    "StoredFile",
    "User",
    "file_shares",
]
