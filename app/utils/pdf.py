"""인보이스 PDF 렌더러 (reportlab).

Invoice PDF renderer. render_invoice_pdf is pure: it turns an invoice
snapshot into bytes and never touches invoice state.
"""

from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.schemas.invoice import InvoiceResponse


def _money(value) -> str:
    return f"£{value:,.2f}"


def render_invoice_pdf(invoice: InvoiceResponse, platform_name: str) -> bytes:
    """인보이스 스냅샷을 PDF로 렌더링합니다.

    Render an invoice snapshot to PDF bytes.

    Args:
        invoice: 인보이스 응답 스냅샷 (Invoice snapshot)
        platform_name: 발행자 이름 (Issuer name shown in the header)

    Returns:
        bytes: PDF 문서 (PDF document)
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title=invoice.invoice_number,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("InvoiceTitle", parent=styles["Heading1"], alignment=TA_CENTER, spaceAfter=12)
    normal = styles["Normal"]

    story = [
        Paragraph(escape(platform_name), title_style),
        Paragraph(f"<b>Invoice</b> {escape(invoice.invoice_number)}", normal),
        Paragraph(f"<b>Issued:</b> {invoice.created_at.date().isoformat()}", normal),
        Paragraph(f"<b>Billed to:</b> {escape(invoice.cafe_name or invoice.cafe_id)}", normal),
        Paragraph(f"<b>Status:</b> {escape(invoice.status.replace('_', ' '))}", normal),
        Spacer(1, 0.6 * cm),
        Paragraph(
            f"<b>Shift:</b> {invoice.shift_date.isoformat()} {invoice.start_time}-{invoice.end_time} "
            f"({invoice.hours:.2f} h, {invoice.employees_count} staff at {_money(invoice.hourly_rate)}/h)",
            normal,
        ),
        Spacer(1, 0.6 * cm),
    ]

    rows = [
        ["Description", "Amount"],
        ["Staff cost", _money(invoice.base_amount)],
        ["Platform fee", _money(invoice.platform_fee)],
    ]
    if invoice.penalty_amount:
        rows.append(["Late cancellation penalty", _money(invoice.penalty_amount)])
    rows.append(["Total", _money(invoice.total_amount)])

    table = Table(rows, colWidths=[11 * cm, 5 * cm])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
        ("LINEBELOW", (0, 0), (-1, 0), 0.75, colors.black),
        ("LINEABOVE", (0, -1), (-1, -1), 0.75, colors.black),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
    ]))
    story.append(table)

    if invoice.paid_at is not None:
        story.append(Spacer(1, 0.6 * cm))
        story.append(Paragraph(f"Paid on {invoice.paid_at.date().isoformat()}", normal))

    doc.build(story)
    return buffer.getvalue()
