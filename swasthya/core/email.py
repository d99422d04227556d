import aiosmtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from swasthya.config import settings
from swasthya.core.logging import logger
from typing import List, Optional


async def send_email(
    to: List[str],
    subject: str,
    body: str,
    html_body: Optional[str] = None
) -> bool:
    """
    Send an email over SMTP.

    Args:
        to: List of recipient email addresses
        subject: Email subject
        body: Plain text email body
        html_body: Optional HTML email body

    Returns:
        bool: True if email sent successfully
    """
    if not settings.EMAILS_ENABLED:
        logger.info(f"Email disabled, skipping '{subject}' to {', '.join(to)}")
        return False

    logger.info(f"📧 Sending email to {', '.join(to)}")
    logger.debug(f"SMTP: {settings.SMTP_HOST}:{settings.SMTP_PORT}, User: {settings.SMTP_USER}")

    message = MIMEMultipart("alternative")
    message["From"] = settings.EMAIL_FROM
    message["To"] = ", ".join(to)
    message["Subject"] = subject

    message.attach(MIMEText(body, "plain"))
    if html_body:
        message.attach(MIMEText(html_body, "html"))

    try:
        await aiosmtplib.send(
            message,
            hostname=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER or None,
            password=settings.SMTP_PASSWORD or None,
            start_tls=True,
        )
        logger.info(f"✅ Email sent successfully to {', '.join(to)}")
        return True
    except aiosmtplib.SMTPAuthenticationError as e:
        logger.error(f"❌ SMTP Authentication failed: {str(e)}")
        logger.error(f"   SMTP User: {settings.SMTP_USER}")
        logger.error(f"   SMTP Host: {settings.SMTP_HOST}:{settings.SMTP_PORT}")
        return False
    except aiosmtplib.SMTPException as e:
        logger.error(f"❌ SMTP error sending email to {to}: {type(e).__name__}: {str(e)}")
        return False
    except OSError as e:
        logger.error(f"❌ Could not reach SMTP server for {to}: {str(e)}")
        return False


async def send_appointment_confirmation_email(
    email: str,
    patient_name: str,
    token_number: int,
    date: str,
    time_slot: str,
    doctor_name: str,
    clinic_name: str,
    clinic_address: Optional[str] = None,
) -> bool:
    """
    Send booking confirmation to a patient who supplied an email address.

    Returns:
        bool: True if email sent successfully
    """
    subject = f"Appointment confirmed - Token #{token_number} at {clinic_name}"

    body = f"""
    Hello {patient_name},

    Your appointment has been booked.

    Token number: {token_number}
    Date: {date}
    Time: {time_slot}
    Doctor: {doctor_name}
    Clinic: {clinic_name}
    {clinic_address or ""}

    Please arrive 10 minutes before your slot and show your token number at the reception.

    Best regards,
    {clinic_name}
    """

    html_body = f"""
    <html>
        <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #0d9488;">Appointment Confirmed</h2>
                <p>Hello {patient_name},</p>
                <p>Your appointment has been booked.</p>
                <div style="text-align: center; margin: 30px 0;">
                    <span style="font-size: 40px; font-weight: bold; color: #0d9488;">#{token_number}</span>
                    <p style="color: #666; margin: 4px 0;">Token number</p>
                </div>
                <table style="width: 100%; border-collapse: collapse;">
                    <tr><td style="padding: 6px 0; color: #666;">Date</td><td>{date}</td></tr>
                    <tr><td style="padding: 6px 0; color: #666;">Time</td><td>{time_slot}</td></tr>
                    <tr><td style="padding: 6px 0; color: #666;">Doctor</td><td>{doctor_name}</td></tr>
                    <tr><td style="padding: 6px 0; color: #666;">Clinic</td><td>{clinic_name}<br>{clinic_address or ""}</td></tr>
                </table>
                <p style="color: #666; font-size: 14px;">
                    Please arrive 10 minutes before your slot and show your token number at the reception.
                </p>
            </div>
        </body>
    </html>
    """

    return await send_email([email], subject, body, html_body)


async def send_clinic_verification_email(
    email: str,
    owner_name: str,
    clinic_name: str,
    approved: bool,
    reason: Optional[str] = None,
) -> bool:
    """
    Tell a clinic owner whether their registration was approved or rejected.

    Returns:
        bool: True if email sent successfully
    """
    if approved:
        subject = f"{clinic_name} is now verified on Swasthya"
        body = f"""
    Hello {owner_name},

    Your clinic "{clinic_name}" has been verified. Patients can now book
    appointments online, and your clinic dashboard is unlocked:
    {settings.FRONTEND_URL}/clinic/dashboard

    Best regards,
    Swasthya Team
    """
    else:
        subject = f"{clinic_name} registration needs attention"
        body = f"""
    Hello {owner_name},

    We could not verify your clinic "{clinic_name}".

    Reason: {reason or "Not specified"}

    You can update your details and submit the registration again.

    Best regards,
    Swasthya Team
    """

    return await send_email([email], subject, body)
