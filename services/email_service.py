import logging
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from core.config import settings

logger = logging.getLogger(__name__)


# What each ephemeral token is for: (subject, call to action, frontend path)
TOKEN_EMAILS = {
    "activation": ("Activate your PMBoard account", "Activate Account", "activate"),
    "deactivation": ("Confirm account deactivation", "Deactivate Account", "deactivate"),
    "password_reset": ("Reset your PMBoard password", "Reset Password", "reset-password"),
    "deletion": ("Confirm account deletion", "Delete Account", "delete-account"),
    "mfa": ("Your PMBoard verification link", "Verify Sign-in", "verify"),
}


class EmailService:
    """
    Centralized email utility for PMBoard.
    Sends the single-use token links via SendGrid, or logs them when unconfigured.
    """

    def __init__(self):
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.sender_email = settings.MAIL_FROM

        self.enabled = bool(self.sendgrid_api_key and self.sender_email)
        if not self.enabled:
            logger.warning("📧 Email service not configured. Missing SENDGRID_API_KEY or MAIL_FROM.")
        else:
            logger.info(f"📧 Email service configured and ready. Sender: {self.sender_email}")

    def build_link(self, purpose: str, token: str) -> str:
        _, _, path = TOKEN_EMAILS[purpose]
        return f"{settings.FRONTEND_URL.rstrip('/')}/{path}/{token}"

    # ============================================================
    # ✅ Send Token Email
    # ============================================================
    def send_token_email(self, to_email: str, token: str, purpose: str) -> bool:
        """Email a token link. Returns False instead of raising on delivery failure."""
        if purpose not in TOKEN_EMAILS:
            raise ValueError(f"Unknown token email purpose: {purpose}")

        subject, action, _ = TOKEN_EMAILS[purpose]
        link = self.build_link(purpose, token)

        if not self.enabled:
            # Development fallback (no SendGrid setup)
            logger.info(f"📨 [Mock Email] To: {to_email}")
            logger.info(f"Subject: {subject} | Link: {link}")
            return True

        minutes = settings.EPHEMERAL_TOKEN_EXPIRE_MINUTES
        html_content = f"""
        <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2>👋 Hello!</h2>
            <p>Use the button below to continue. This link can be used once.</p>

            <p style="text-align: center; margin: 20px 0;">
                <a href="{link}" style="
                    background-color: #4F46E5;
                    color: white;
                    padding: 12px 28px;
                    text-decoration: none;
                    border-radius: 6px;
                    font-weight: bold;
                    display: inline-block;
                ">{action}</a>
            </p>

            <p>If the button doesn’t work, copy and paste this link into your browser:</p>
            <p style="word-break: break-all; color: #555;">{link}</p>

            <p><small>This link will expire in {minutes} minutes.</small></p>
            <hr style="border:none; border-top:1px solid #eee; margin: 24px 0;">
            <p>Best regards,<br><strong>The PMBoard Team</strong></p>
        </div>
        """

        try:
            message = Mail(
                from_email=self.sender_email,
                to_emails=to_email,
                subject=subject,
                html_content=html_content,
            )
            sg = SendGridAPIClient(self.sendgrid_api_key)
            response = sg.send(message)
            logger.info(f"✅ {purpose} email sent to {to_email}. Status: {response.status_code}")
            return True
        except Exception as e:
            logger.exception("❌ Failed to send %s email to %s: %s", purpose, to_email, e)
            return False


# ============================================================
# ✅ Global instance for app-wide import
# ============================================================
email_service = EmailService()
