"""이메일 발송 유틸리티 — Brevo SMTP (aiosmtplib).

Email delivery utility. Messages are built from a small set of named
templates; SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Any

import aiosmtplib

from app.config import settings

# 템플릿 ID → (제목, 본문) — Template id → (subject, body); {name} placeholders
TEMPLATES: dict[str, tuple[str, str]] = {
    "shift_approved": (
        "Your shift on {date} has been approved",
        "Your shift on {date} ({start_time}-{end_time}) is now open to employees.",
    ),
    "shift_fully_staffed": (
        "Your shift on {date} is fully staffed",
        "All {required_employees} places on your shift on {date} ({start_time}-{end_time}) have been filled.",
    ),
    "employee_rejected": (
        "Update on your shift on {date}",
        "The café has removed you from the shift on {date} ({start_time}-{end_time}). Reason: {reason}",
    ),
    "invoice_approved": (
        "Invoice {invoice_number} is ready for payment",
        "Invoice {invoice_number} for {total_amount} has been approved. "
        "Please pay it and upload your payment proof.",
    ),
}


def smtp_configured() -> bool:
    """SMTP 자격 증명 설정 여부 — Whether SMTP credentials are present."""
    return bool(settings.SMTP_USER and settings.SMTP_PASSWORD and settings.SMTP_FROM_EMAIL)


def render_template(template_id: str, params: dict[str, Any]) -> tuple[str, str, str]:
    """템플릿을 렌더링합니다.

    Render a named template.

    Args:
        template_id: 템플릿 ID (Key of TEMPLATES)
        params: 치환 값 (Placeholder values)

    Returns:
        tuple[str, str, str]: (제목, HTML 본문, 텍스트 본문) (subject, html, text)

    Raises:
        KeyError: 알 수 없는 템플릿 또는 누락된 값 (Unknown template or missing param)
    """
    subject_tpl, body_tpl = TEMPLATES[template_id]
    subject: str = subject_tpl.format(**params)
    text: str = body_tpl.format(**params)
    html: str = f"<p>{escape(text)}</p><p>— {escape(settings.SMTP_FROM_NAME)}</p>"
    return subject, html, text


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
) -> None:
    """이메일 발송.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (선택)
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
    msg["To"] = to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        start_tls=True,
    )
