"""
Outbound email for the SHIFT portal.

Messages go out over SMTP with STARTTLS. Connection details come from the
environment:
  - EMAIL_SERVER_HOST / EMAIL_SERVER_PORT
  - EMAIL_SERVER_USER / EMAIL_SERVER_PASS
  - EMAIL_FROM (display sender, defaults to the SHIFT noreply address)
"""
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from html import escape

from utils.logger_factory import new_logger

DEFAULT_FROM = "SHIFT <noreply@shift.example>"
OTP_SUBJECT = "Your SHIFT Verification Code"

log = new_logger("email_service")


class EmailDeliveryFailed(Exception):
    """Raised when a message could not be handed to the SMTP server."""


def render_otp_email(full_name: str, code: str, expiry_minutes: int) -> tuple[str, str]:
    """Return the (plain text, html) bodies of a verification code email."""
    text_part = f"""
Welcome to SHIFT

Hi {full_name}, here's your verification code:

{code}

This code expires in {expiry_minutes} minutes.
If you didn't request this code, please ignore this email.
"""

    display_name = escape(full_name)

    # Table-based layout renders consistently across Gmail/Outlook/Yahoo
    html = f"""
<!DOCTYPE html>
<html>
  <head>
    <meta http-equiv="Content-Type" content="text/html; charset=utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>SHIFT Verification</title>
  </head>
  <body style="margin:0; padding:0; background-color:#f5f5f5;">
    <div style="display:none; font-size:1px; color:#f5f5f5; line-height:1px; max-height:0; max-width:0; opacity:0; overflow:hidden;">Your verification code is {code}.</div>
    <table role="presentation" cellpadding="0" cellspacing="0" border="0" width="100%" style="background-color:#f5f5f5;">
      <tr>
        <td align="center" style="padding:20px 12px;">
          <table role="presentation" cellpadding="0" cellspacing="0" border="0" width="480" style="width:480px; max-width:480px; background-color:#ffffff; border-radius:12px;">
            <tr>
              <td align="center" style="padding:40px 24px 8px 24px; font-family:Arial, sans-serif;">
                <div style="font-size:24px; color:#1a1a1a; font-weight:700;">Welcome to SHIFT</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:0 24px 32px 24px; font-family:Arial, sans-serif;">
                <div style="font-size:16px; color:#666666;">Hi {display_name}, here's your verification code:</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:24px; background-color:#f0f9ff;">
                <div style="font-family:Arial, sans-serif; font-size:36px; letter-spacing:8px; color:#0ea5e9; font-weight:700;">{code}</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:24px 24px 0 24px;">
                <div style="font-family:Arial, sans-serif; font-size:14px; color:#888888;">This code expires in {expiry_minutes} minutes.</div>
              </td>
            </tr>
            <tr>
              <td align="center" style="padding:8px 24px 40px 24px;">
                <div style="font-family:Arial, sans-serif; font-size:14px; color:#888888;">If you didn't request this code, please ignore this email.</div>
              </td>
            </tr>
          </table>
        </td>
      </tr>
    </table>
  </body>
</html>
"""
    return text_part, html


def send_email(to_email: str, subject: str, text_body: str, html_body: str) -> str:
    """
    Send a multipart (text + html) email and return its Message-ID.

    Raises EmailDeliveryFailed on missing configuration or any SMTP/socket error.
    """
    smtp_user = os.environ.get("EMAIL_SERVER_USER")
    smtp_password = os.environ.get("EMAIL_SERVER_PASS")
    smtp_server = os.environ.get("EMAIL_SERVER_HOST")
    smtp_port = int(os.environ.get("EMAIL_SERVER_PORT", 587))
    from_header = os.environ.get("EMAIL_FROM", DEFAULT_FROM)

    if not smtp_server:
        raise EmailDeliveryFailed("EMAIL_SERVER_HOST is not set")

    message_id = make_msgid(domain="shift.example")
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_header
    msg["To"] = to_email
    msg["Message-ID"] = message_id

    # Text first, then HTML (some clients pick the first alternative)
    msg.attach(MIMEText(text_body, "plain"))
    msg.attach(MIMEText(html_body, "html"))

    try:
        with smtplib.SMTP(smtp_server, smtp_port, timeout=15) as server:
            server.starttls()
            if smtp_user:
                server.login(smtp_user, smtp_password or "")
            server.sendmail(smtp_user or from_header, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        log.error(f"SMTP delivery to {to_email} failed: {e}")
        raise EmailDeliveryFailed(str(e)) from e

    log.info(f"Email '{subject}' sent to {to_email} [{message_id}]")
    return message_id


def send_otp_email(to_email: str, full_name: str, code: str, expiry_minutes: int) -> str:
    text_part, html = render_otp_email(full_name, code, expiry_minutes)
    return send_email(to_email, OTP_SUBJECT, text_part, html)
