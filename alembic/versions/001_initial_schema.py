"""Initial portal schema.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

Tables: users, hospitals, doctors, appointments, prescriptions, ratings,
files, file_shares, chats, chat_messages.

The partial unique index ``uq_appointments_active_slot`` keeps at most one
non-cancelled appointment per (doctor_id, date, time).
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id(),
        sa.Column("fullname", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column(
            "role",
            sa.String(20),
            nullable=False,
            server_default="user",
            comment="user, doctor or hospital",
        ),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("profile_image", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "hospitals",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("latitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("images", sa.JSON(), nullable=False, comment="Up to 4 blob URIs"),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_hospitals"),
    )
    op.create_index("ix_hospitals_email", "hospitals", ["email"], unique=True)
    op.create_index("ix_hospitals_name", "hospitals", ["name"])
    op.create_index("ix_hospitals_city", "hospitals", ["city"])

    op.create_table(
        "doctors",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("specialization", sa.String(200), nullable=False),
        sa.Column("qualifications", sa.JSON(), nullable=False),
        sa.Column("experience", sa.Integer(), nullable=True, comment="Years"),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("about", sa.Text(), nullable=True),
        sa.Column("profile_image", sa.String(1000), nullable=True),
        sa.Column("consultation_fees", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "hospital_id",
            sa.String(36),
            sa.ForeignKey("hospitals.id", name="fk_doctors_hospital_id_hospitals", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("verification_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_ratings", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_doctors"),
    )
    op.create_index("ix_doctors_email", "doctors", ["email"], unique=True)
    op.create_index("ix_doctors_hospital_id", "doctors", ["hospital_id"])
    op.create_index("ix_doctors_specialization", "doctors", ["specialization"])
    op.create_index("ix_doctors_verification_status", "doctors", ["verification_status"])

    op.create_table(
        "appointments",
        _id(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_appointments_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "doctor_id",
            sa.String(36),
            sa.ForeignKey("doctors.id", name="fk_appointments_doctor_id_doctors", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.String(10), nullable=False, comment="YYYY-MM-DD"),
        sa.Column("time", sa.String(10), nullable=False, comment="Slot label, e.g. 10:00"),
        sa.Column("status", sa.String(20), nullable=False, server_default="booked"),
        sa.Column("type", sa.String(20), nullable=False, server_default="in-person"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="unpaid"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_appointments"),
    )
    op.create_index("ix_appointments_user_id", "appointments", ["user_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_doctor_schedule", "appointments", ["doctor_id", "date", "time"])
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["doctor_id", "date", "time"],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )

    op.create_table(
        "prescriptions",
        _id(),
        sa.Column(
            "patient_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_prescriptions_patient_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "doctor_id",
            sa.String(36),
            sa.ForeignKey("doctors.id", name="fk_prescriptions_doctor_id_doctors", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("appointment_id", sa.String(36), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="Active"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("follow_up_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("medications", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_prescriptions"),
        sa.UniqueConstraint("appointment_id", name="uq_prescriptions_appointment_id"),
    )
    op.create_index("ix_prescriptions_patient_id", "prescriptions", ["patient_id"])
    op.create_index("ix_prescriptions_doctor_id", "prescriptions", ["doctor_id"])
    op.create_index("ix_prescriptions_doctor_patient", "prescriptions", ["doctor_id", "patient_id"])

    op.create_table(
        "ratings",
        _id(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_ratings_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("target_type", sa.String(20), nullable=False, comment="doctor or hospital"),
        sa.Column("target_id", sa.String(36), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review", sa.String(500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_ratings"),
        sa.UniqueConstraint("user_id", "target_type", "target_id", name="uq_ratings_user_target"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_rating_range"),
    )
    op.create_index("ix_ratings_target", "ratings", ["target_type", "target_id"])

    op.create_table(
        "files",
        _id(),
        sa.Column("file_name", sa.String(500), nullable=False),
        sa.Column("storage_key", sa.String(1000), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("file_type", sa.String(100), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("category", sa.String(100), nullable=False, server_default="Uncategorized"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column(
            "owner_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_files_owner_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "doctor_id",
            sa.String(36),
            sa.ForeignKey("doctors.id", name="fk_files_doctor_id_doctors", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("upload_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_files"),
        sa.UniqueConstraint("storage_key", name="uq_files_storage_key"),
    )
    op.create_index("ix_files_owner_id", "files", ["owner_id"])
    op.create_index("ix_files_doctor_id", "files", ["doctor_id"])
    op.create_index("ix_files_owner_category", "files", ["owner_id", "category"])

    op.create_table(
        "file_shares",
        sa.Column(
            "file_id",
            sa.String(36),
            sa.ForeignKey("files.id", name="fk_file_shares_file_id_files", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_file_shares_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shared_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("file_id", "user_id", name="pk_file_shares"),
    )

    op.create_table(
        "chats",
        _id(),
        sa.Column(
            "user_id",
            sa.String(36),
            sa.ForeignKey("users.id", name="fk_chats_user_id_users", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False, server_default="New Chat"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_chats"),
    )
    op.create_index("ix_chats_user_id", "chats", ["user_id"])

    op.create_table(
        "chat_messages",
        _id(),
        sa.Column(
            "chat_id",
            sa.String(36),
            sa.ForeignKey("chats.id", name="fk_chat_messages_chat_id_chats", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("sender", sa.String(10), nullable=False, comment="user or bot"),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_chat_messages"),
    )
    op.create_index("ix_chat_messages_chat_id", "chat_messages", ["chat_id"])


def downgrade() -> None:
    op.drop_index("ix_chat_messages_chat_id", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("ix_chats_user_id", table_name="chats")
    op.drop_table("chats")
    op.drop_table("file_shares")
    op.drop_index("ix_files_owner_category", table_name="files")
    op.drop_index("ix_files_doctor_id", table_name="files")
    op.drop_index("ix_files_owner_id", table_name="files")
    op.drop_table("files")
    op.drop_index("ix_ratings_target", table_name="ratings")
    op.drop_table("ratings")
    op.drop_index("ix_prescriptions_doctor_patient", table_name="prescriptions")
    op.drop_index("ix_prescriptions_doctor_id", table_name="prescriptions")
    op.drop_index("ix_prescriptions_patient_id", table_name="prescriptions")
    op.drop_table("prescriptions")
    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_index("ix_appointments_doctor_schedule", table_name="appointments")
    op.drop_index("ix_appointments_doctor_id", table_name="appointments")
    op.drop_index("ix_appointments_user_id", table_name="appointments")
    op.drop_table("appointments")
    op.drop_index("ix_doctors_verification_status", table_name="doctors")
    op.drop_index("ix_doctors_specialization", table_name="doctors")
    op.drop_index("ix_doctors_hospital_id", table_name="doctors")
    op.drop_index("ix_doctors_email", table_name="doctors")
    op.drop_table("doctors")
    op.drop_index("ix_hospitals_city", table_name="hospitals")
    op.drop_index("ix_hospitals_name", table_name="hospitals")
    op.drop_index("ix_hospitals_email", table_name="hospitals")
    op.drop_table("hospitals")
    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
