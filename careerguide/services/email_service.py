"""
Email Service

PURPOSE:
Send account and application emails through an SMTP relay.

EMAILS:
- Verification: link to /verify-email?token=... (expires in 24 hours)
- Welcome: after the address is verified
- Password reset: link to /reset-password?token=... (expires in 1 hour)
- Application status: when an institution or admin changes a decision
- Account approval: when an admin activates an account

Sending never raises. Every method returns a result dict:
    {"success": True, "message": "Email sent"}
    {"success": False, "message": "<reason>"}
so callers can record the outcome without failing the request.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from html import escape
from typing import Optional

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from careerguide.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

BRAND = "CareerGuide LS"

STATUS_MESSAGES = {
    "pending": "is waiting to be reviewed",
    "under_review": "is now under review",
    "approved": "has been approved",
    "admitted": "has been successful - you have been admitted",
    "rejected": "was not successful this time",
    "waitlist": "has been placed on the waiting list",
    "accepted": "has been accepted - your place is confirmed",
}


def _html_layout(heading: str, paragraphs: list, button: Optional[tuple] = None, color: str = "#2563eb") -> str:
    """Wrap paragraphs (already escaped) in the shared email layout."""
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    if button:
        label, url = button
        body += (
            '<div style="text-align: center; margin: 30px 0;">'
            f'<a href="{escape(url)}" style="background-color: #2563eb; color: white; '
            'padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">'
            f"{escape(label)}</a></div>"
        )
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; '
        'padding: 20px; border: 1px solid #e0e0e0; border-radius: 8px;">'
        f'<h2 style="color: {color}; text-align: center;">{escape(heading)}</h2>'
        f"{body}"
        f"<p>Best regards,<br><strong>The {BRAND} Team</strong></p>"
        '<p style="text-align: center; color: #6b7280; font-size: 12px;">'
        "This is an automated message. Please do not reply to this email.</p>"
        "</div>"
    )


class EmailService:
    """
    SMTP email sender.

    Disabled (every send returns success=False) until SMTP_HOST, SMTP_USER
    and SMTP_PASSWORD are configured.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.enabled = self.settings.smtp_configured

    # ============================================================
    # TRANSPORT
    # ============================================================

    def build_message(self, to: str, subject: str, text: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))
        message["From"] = self.settings.email_from
        message["To"] = to
        message["Subject"] = subject
        return message

    def _deliver(self, message: MIMEMultipart) -> None:
        """Blocking SMTP send. Runs in the threadpool."""
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as server:
            if self.settings.smtp_use_tls:
                server.starttls()
            server.login(self.settings.smtp_user, self.settings.smtp_password)
            sender = parseaddr(self.settings.email_from)[1] or self.settings.smtp_user
            server.sendmail(sender, [message["To"]], message.as_string())

    async def send_email(self, to: str, subject: str, text: str, html: str) -> dict:
        if not to:
            return {"success": False, "message": "No recipient address"}
        if not self.enabled:
            logger.info("Email not configured, skipping '%s' to %s", subject, to)
            return {"success": False, "message": "Email not configured"}

        message = self.build_message(to, subject, text, html)
        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send '%s' to %s: %s", subject, to, e)
            return {"success": False, "message": f"Failed to send email: {e}"}

        logger.info("Sent '%s' to %s", subject, to)
        return {"success": True, "message": "Email sent"}

    def link(self, path: str, token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/{path}?token={token}"

    # ============================================================
    # ACCOUNT EMAILS
    # ============================================================

    async def send_verification_email(self, user: dict, token: str) -> dict:
        url = self.link("verify-email", token)
        name = user.get("name", "there")
        hours = self.settings.verification_token_hours
        text = (
            f"Hello {name},\n\n"
            f"Please verify your email address for {BRAND} by opening this link:\n{url}\n\n"
            f"The link expires in {hours} hours."
        )
        html = _html_layout(
            "Verify Your Email Address",
            [
                f"Hello <strong>{escape(name)}</strong>,",
                f"Thank you for registering with {BRAND}. Please confirm your email address.",
                f"This link will expire in {hours} hours.",
            ],
            button=("Verify Email", url),
        )
        return await self.send_email(user.get("email"), f"Verify your email - {BRAND}", text, html)

    async def send_welcome_email(self, user: dict) -> dict:
        name = user.get("name", "there")
        text = (
            f"Hello {name},\n\n"
            f"Welcome to {BRAND}! Your email is verified and your account is ready."
        )
        html = _html_layout(
            f"Welcome to {BRAND}!",
            [
                f"Hello <strong>{escape(name)}</strong>,",
                "Your email is verified and your account is ready. You can now browse "
                "institutions and courses, apply online and explore career opportunities.",
            ],
        )
        return await self.send_email(user.get("email"), f"Welcome to {BRAND}!", text, html)

    async def send_password_reset_email(self, user: dict, token: str) -> dict:
        url = self.link("reset-password", token)
        name = user.get("name", "there")
        hours = self.settings.reset_token_hours
        text = (
            f"Hello {name},\n\n"
            f"We received a request to reset your {BRAND} password. Open this link to choose a new one:\n{url}\n\n"
            f"The link expires in {hours} hour(s). If you did not request a reset, ignore this email."
        )
        html = _html_layout(
            "Password Reset",
            [
                f"Hello <strong>{escape(name)}</strong>,",
                f"We received a request to reset the password for your {BRAND} account.",
                f"This link will expire in {hours} hour(s). If you didn't request this reset, please ignore this email.",
            ],
            button=("Reset Password", url),
            color="#ef4444",
        )
        return await self.send_email(user.get("email"), f"Password Reset Request - {BRAND}", text, html)

    async def send_account_approved_email(self, user: dict) -> dict:
        name = user.get("name", "there")
        role = user.get("role", "user")
        text = f"Hello {name},\n\nYour {role} account has been approved. You can now access all features."
        html = _html_layout(
            "Account Approved",
            [
                f"Hello <strong>{escape(name)}</strong>,",
                f"Your {escape(role)} account has been approved. You can now access all features.",
            ],
            color="#10b981",
        )
        return await self.send_email(user.get("email"), f"Account Approval Notification - {BRAND}", text, html)

    # ============================================================
    # APPLICATION EMAILS
    # ============================================================

    async def send_application_status_email(self, user: dict, application: dict) -> dict:
        name = user.get("name", "there")
        status = application.get("status", "pending")
        course = application.get("courseName") or "your course"
        institution = application.get("institutionName") or "the institution"
        outcome = STATUS_MESSAGES.get(status, f"is now '{status}'")
        text = (
            f"Hello {name},\n\n"
            f"Your application for {course} at {institution} {outcome}.\n\n"
            "Log in to your dashboard for details."
        )
        html = _html_layout(
            "Application Update",
            [
                f"Hello <strong>{escape(name)}</strong>,",
                f"Your application for <strong>{escape(course)}</strong> at "
                f"<strong>{escape(institution)}</strong> {escape(outcome)}.",
                "Log in to your dashboard for details.",
            ],
        )
        return await self.send_email(user.get("email"), f"Application Update - {BRAND}", text, html)


def get_email_service(request: Request) -> EmailService:
    """Dependency - the email service owned by the running app."""
    return request.app.state.email_service
