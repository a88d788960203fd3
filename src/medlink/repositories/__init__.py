"""Repositories package - Data access layer.

Repositories flush but never commit; the request session commits once the
handler returns successfully.
"""
from .appointment_repository import AppointmentRepository
from .chat_repository import ChatRepository
from .doctor_repository import DoctorRepository
from .file_repository import FileRepository
from .hospital_repository import HospitalRepository
from .journal_repository import JournalRepository, MoodRepository
from .prescription_repository import PrescriptionRepository
from .rating_repository import RatingRepository
from .user_repository import UserRepository

__all__ = [
    "AppointmentRepository",
    "ChatRepository",
    "DoctorRepository",
    "FileRepository",
    "HospitalRepository",
    "JournalRepository",
    "MoodRepository",
    "PrescriptionRepository",
    "RatingRepository",
    "UserRepository",
]
