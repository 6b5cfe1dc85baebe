"""Email service mirroring application notifications to the candidate's inbox."""
import asyncio
import logging
from html import escape

from crewlink.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Handles email sending in dev and production modes."""
    
    def __init__(self, mode: str = None):
        self.mode = mode or settings.notification_email_mode
        if self.mode == "prod":
            try:
                from sendgrid import SendGridAPIClient
                self.sendgrid_client = SendGridAPIClient(settings.sendgrid_api_key)
            except ImportError:
                logger.error("SendGrid not installed but notification_email_mode is 'prod'")
                raise
        else:
            self.sendgrid_client = None
    
    async def send_application_status_email(self, email: str, title: str, message: str) -> bool:
        """Send the outcome of an application to the candidate."""
        subject = f"CrewLink: {title}"
        
        html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; background-color: #f4f4f4; padding: 20px;">
                <div style="max-width: 600px; margin: 0 auto; background-color: white; padding: 40px; border-radius: 8px;">
                    <h2 style="color: #333; margin-bottom: 20px;">{escape(title)}</h2>
                    <p style="color: #666; font-size: 16px; line-height: 1.6;">{escape(message)}</p>
                    <p style="color: #999; font-size: 12px; margin-top: 20px;">
                        Log in to CrewLink to see the full details of your application.
                    </p>
                </div>
            </body>
        </html>
        """
        
        text_content = f"""
        {title}
        
        {message}
        
        Log in to CrewLink to see the full details of your application.
        """
        
        return await self._send_email(email, subject, text_content, html_content)
    
    async def _send_email(self, to_email: str, subject: str, text_content: str, html_content: str) -> bool:
        """Internal method to send email via SendGrid or dev console."""
        if self.mode == "dev":
            logger.info(f"[DEV MODE] Email to {to_email}: {subject}")
            logger.info(f"[DEV MODE] Content:\n{text_content}")
            return True
        
        from sendgrid.helpers.mail import Mail, Email, To, Content
        
        mail = Mail(
            from_email=Email(settings.email_from_address, "CrewLink"),
            to_emails=To(to_email),
            subject=subject,
            plain_text_content=Content("text/plain", text_content),
            html_content=Content("text/html", html_content)
        )
        
        # SendGrid client is blocking
        response = await asyncio.to_thread(self.sendgrid_client.send, mail)
        
        if 200 <= response.status_code < 300:
            logger.info(f"Email sent to {to_email}: {subject}")
            return True
        logger.error(f"Failed to send email to {to_email}: {response.status_code}")
        return False
