'''
Renders a finance profile snapshot as a PDF document.
'''
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from ..models import finance as finance_models
from .finance import format_money

PDF_CONTENT_TYPE = "application/pdf"


def render_finance_report_pdf(
    profile: finance_models.StudentFinanceProfile,
    report_date: datetime,
    currency: str
) -> bytes:
    """
    Lays out the identity block, the balance summary and the payment
    history of a snapshot, and returns the finished PDF bytes.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"Finance Report - {profile.tenant_code}",
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
    )
    elements = []

    # Styles
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#1a1a1a'),
        spaceAfter=20,
        alignment=TA_CENTER
    )

    # Title
    elements.append(Paragraph('Student Finance Report', title_style))
    elements.append(Paragraph(f"Generated {report_date:%d %B %Y %H:%M} UTC", styles['Normal']))
    elements.append(Spacer(1, 16))

    # Identity and balance
    next_due = (
        f"{profile.next_payment_due:%d %B %Y}" if profile.next_payment_due else "No pending payments"
    )
    summary = Table([
        ['Name', profile.full_name],
        ['Tenant Code', profile.tenant_code],
        ['Room Number', profile.room_number],
        ['Email', profile.email],
        ['Phone', profile.phone],
        ['Outstanding Balance', format_money(profile.outstanding_balance, currency)],
        ['Next Payment Due', next_due],
    ], colWidths=[2 * inch, 4.5 * inch])
    summary.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ('LINEBELOW', (0, -1), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(summary)
    elements.append(Spacer(1, 20))

    # Payment history
    elements.append(Paragraph('Payment History', styles['Heading2']))
    data = [['Date', 'Type', 'Description', 'Status', 'Amount']]
    for payment in profile.payment_history:
        data.append([
            f"{payment.date:%Y-%m-%d}",
            payment.type.value.capitalize(),
            Paragraph(escape(payment.description or ''), styles['BodyText']),
            payment.status.value.capitalize(),
            format_money(payment.amount, currency),
        ])
    if len(data) == 1:
        data.append(['', '', 'No payments recorded', '', ''])

    history = Table(data, repeatRows=1, colWidths=[0.9 * inch, 0.8 * inch, 2.6 * inch, 0.9 * inch, 1.3 * inch])
    history.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.lightgrey),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#f2f2f2')]),
    ]))
    elements.append(history)

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf
