import requests

from config import get_settings
from exceptions import ConfigurationError, NotificationDeliveryError

BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def send_notification_email(to_email: str, title: str, message: str, action_url: str = None):
     settings = get_settings().notifications
     if not settings.brevo_api_key:
          raise ConfigurationError("BREVO_API_KEY is not set")

     link = f'<p><a href="{action_url}">Open in LeaseKeeper</a></p>' if action_url else ""

     response = requests.post(
          BREVO_URL,
          headers={
               "api-key": settings.brevo_api_key,
               "Content-Type": "application/json",
          },
          json={
               "sender": {"name": settings.sender_name, "email": settings.sender_email},
               "to": [{"email": to_email}],
               "subject": title,
               "htmlContent": f"""
                    <h2>{title}</h2>
                    <p>{message}</p>
                    {link}
               """,
          },
          timeout=10,
     )
     if response.status_code not in (200, 201):
          raise NotificationDeliveryError(f"Brevo error: {response.text}")
