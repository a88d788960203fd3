"""Shared Enums for the application.

String-valued enums used by models, schemas and services. Values are the
exact literals stored in the database and accepted on the wire.
"""
from enum import Enum


class UserRole(str, Enum):
    """Role tag on the base identity record."""
    USER = "user"
    DOCTOR = "doctor"
    HOSPITAL = "hospital"


class VerificationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle. Any state is directly settable."""
    BOOKED = "booked"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class AppointmentType(str, Enum):
    IN_PERSON = "in-person"
    TELEMEDICINE = "telemedicine"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    FAILED = "failed"


class PrescriptionStatus(str, Enum):
    ACTIVE = "Active"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class RatingTargetType(str, Enum):
    DOCTOR = "doctor"
    HOSPITAL = "hospital"


class MessageSender(str, Enum):
    USER = "user"
    BOT = "bot"
