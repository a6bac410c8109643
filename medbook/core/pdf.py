from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from medbook.models.prescription import Prescription


def render_prescription_pdf(prescription: Prescription) -> bytes:
    """Render a prescription, with its doctor and patient, as a PDF document."""
    appointment = prescription.appointment
    doctor = appointment.doctor
    patient = appointment.patient

    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title=f"Prescription {prescription.id}")
    styles = getSampleStyleSheet()
    story = []

    # Title
    title_style = ParagraphStyle(
        'PrescriptionTitle',
        parent=styles['Heading1'],
        fontSize=24,
        spaceAfter=30
    )
    story.append(Paragraph("Medical Prescription", title_style))

    # Doctor
    story.append(Paragraph("Doctor Information:", styles['Heading2']))
    story.append(Paragraph(f"Name: {escape(doctor.user.name)}", styles['Normal']))
    story.append(Paragraph(f"Specialization: {escape(doctor.specialization)}", styles['Normal']))
    if doctor.hospital is not None:
        story.append(Paragraph(f"Hospital: {escape(doctor.hospital.name)}, {escape(doctor.hospital.location)}", styles['Normal']))
    story.append(Spacer(1, 20))

    # Patient
    story.append(Paragraph("Patient Information:", styles['Heading2']))
    story.append(Paragraph(f"Name: {escape(patient.user.name)}", styles['Normal']))
    story.append(Paragraph(f"Age: {patient.age}", styles['Normal']))
    story.append(Paragraph(f"Contact: {escape(patient.contact)}", styles['Normal']))
    story.append(Spacer(1, 20))

    story.append(Paragraph("Reason for visit:", styles['Heading2']))
    story.append(Paragraph(escape(appointment.reason), styles['Normal']))
    story.append(Spacer(1, 20))

    # Medicines
    story.append(Paragraph("Medicines:", styles['Heading2']))
    med_data = [["Medicine", "Dosage", "Frequency"]]
    for med in prescription.medicines or []:
        med_data.append([med['name'], med['dosage'], med['frequency']])

    med_table = Table(med_data)
    med_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 14),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 12),
        ('GRID', (0, 0), (-1, -1), 1, colors.black)
    ]))
    story.append(med_table)
    story.append(Spacer(1, 20))

    if prescription.instructions:
        story.append(Paragraph("Instructions:", styles['Heading2']))
        story.append(Paragraph(escape(prescription.instructions), styles['Normal']))
        story.append(Spacer(1, 20))

    if prescription.date is not None:
        story.append(Paragraph(f"Date: {prescription.date.strftime('%Y-%m-%d %H:%M')}", styles['Normal']))

    doc.build(story)
    return buffer.getvalue()
