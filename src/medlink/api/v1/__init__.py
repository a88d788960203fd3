"""API v1 - versioned router.

Router structure
----------------
PUBLIC (no auth):
  /health, /ready, /live  → health checks
  /users/signup           → create the base identity record
  /files/download         → stream a blob by key (share links land here)

AUTHENTICATED (valid session JWT; role checks per endpoint):
  /users/*          → current user, profile update, activity stats, user list
  /doctors/*        → doctor profile upsert, lookup, list, profile image
  /hospitals/*      → hospital upsert (geocoded), lookup, roster, remove doctor
  /appointment/*    → book, status, payment, doctor/user lists
  /prescriptions/*  → create, read, update, soft cancel, check, PDF share
  /ratings/*        → submit, get
  /files/*          → upload, list, share, shared-with-me
  /assistant/*      → chatbot, symptom checker
  /chats/*          → chat history with the assistant
  /journals/*       → private journal entries
  /moods/*          → mood check-ins
"""
from fastapi import APIRouter, Depends

from ...core.security import require_authentication
from .endpoints import (
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

router = APIRouter(prefix="/api/v1")

# =========================================================================
# PUBLIC ENDPOINTS: no auth required
# =========================================================================

router.include_router(health.router, tags=["Health"])

# =========================================================================
# MIXED ENDPOINTS: auth declared per endpoint
# =========================================================================

# /users/signup is public; every other users route depends on CurrentUser.
router.include_router(users.router, tags=["Users"])

# /files/download is public; every other files route requires a session.
router.include_router(files.router, tags=["Files"])

# =========================================================================
# AUTHENTICATED ENDPOINTS: require valid JWT
# =========================================================================

for module, tag in (
    (doctors, "Doctors"),
    (hospitals, "Hospitals"),
    (appointments, "Appointments"),
    (prescriptions, "Prescriptions"),
    (ratings, "Ratings"),
    (assistant, "Assistant"),
    (chats, "Chats"),
    (journals, "Journals"),
    (moods, "Moods"),
):
    router.include_router(
        module.router,
        tags=[tag],
        dependencies=[Depends(require_authentication)],
    )
