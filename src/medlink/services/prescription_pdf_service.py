"""Render a prescription as a single A4 PDF page set with reportlab."""
from __future__ import annotations

import io
import textwrap

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from ..models.prescription import Prescription

MARGIN = 20 * mm
LINE_HEIGHT = 6 * mm
WRAP_WIDTH = 90
FOOTER_TEXT = "This prescription was generated electronically by MedLink."


class _PdfWriter:
    """Top-down text cursor that starts a new page when it runs out of room."""

    def __init__(self, buffer: io.BytesIO) -> None:
        self.canvas = canvas.Canvas(buffer, pagesize=A4)
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def _ensure_room(self, lines: int = 1) -> None:
        if self.y - lines * LINE_HEIGHT < MARGIN + 2 * LINE_HEIGHT:
            self.canvas.showPage()
            self.y = self.height - MARGIN

    def line(self, text: str, *, font: str = "Helvetica", size: int = 11, indent: float = 0) -> None:
        self._ensure_room()
        self.canvas.setFont(font, size)
        self.canvas.drawString(MARGIN + indent, self.y, text)
        self.y -= LINE_HEIGHT

    def paragraph(self, text: str, *, indent: float = 0) -> None:
        for chunk in text.splitlines() or [""]:
            for wrapped in textwrap.wrap(chunk, WRAP_WIDTH) or [""]:
                self.line(wrapped, indent=indent)

    def gap(self) -> None:
        self.y -= LINE_HEIGHT / 2

    def rule(self) -> None:
        self._ensure_room()
        self.canvas.line(MARGIN, self.y, self.width - MARGIN, self.y)
        self.y -= LINE_HEIGHT

    def finish(self) -> None:
        self.canvas.setFont("Helvetica-Oblique", 8)
        self.canvas.drawCentredString(self.width / 2, MARGIN / 2, FOOTER_TEXT)
        self.canvas.showPage()
        self.canvas.save()


def render_prescription_pdf(prescription: Prescription) -> bytes:
    buffer = io.BytesIO()
    pdf = _PdfWriter(buffer)

    pdf.line("Medical Prescription", font="Helvetica-Bold", size=18)
    pdf.rule()

    patient = prescription.patient
    pdf.line("Patient", font="Helvetica-Bold", size=12)
    pdf.line(f"Name: {patient.fullname if patient else 'Unknown'}")
    pdf.line(f"Email: {patient.email if patient else '-'}")
    pdf.gap()

    doctor = prescription.doctor
    pdf.line("Prescriber", font="Helvetica-Bold", size=12)
    pdf.line(f"Dr. {doctor.name if doctor else 'Unknown'}")
    if doctor and doctor.specialization:
        pdf.line(doctor.specialization)
    pdf.gap()

    pdf.line(f"Date: {prescription.created_at:%Y-%m-%d}")
    pdf.line(f"Status: {prescription.status}")
    if prescription.follow_up_date:
        pdf.line(f"Follow-up: {prescription.follow_up_date:%Y-%m-%d}")
    pdf.rule()

    pdf.line("Medications", font="Helvetica-Bold", size=12)
    for number, med in enumerate(prescription.medications or [], start=1):
        pdf.line(f"{number}. {med.get('name', '')}", font="Helvetica-Bold")
        pdf.line(f"Dosage: {med.get('dosage', '')}", indent=6 * mm)
        pdf.line(f"Frequency: {med.get('frequency', '')}", indent=6 * mm)
        pdf.line(f"Duration: {med.get('duration', '')}", indent=6 * mm)
        if med.get("notes"):
            pdf.paragraph(f"Notes: {med['notes']}", indent=6 * mm)
        pdf.gap()

    if prescription.notes:
        pdf.rule()
        pdf.line("Notes", font="Helvetica-Bold", size=12)
        pdf.paragraph(prescription.notes)

    pdf.finish()
    return buffer.getvalue()
