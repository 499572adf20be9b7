"""
Brevo transactional email client.

Sends one HTML email with a single base64 attachment through Brevo's
SMTP API:

  POST https://api.brevo.com/v3/smtp/email
  api-key: <BREVO_API_KEY>

  {
    "sender":      {"email": BREVO_SENDER_EMAIL, "name": BREVO_SENDER_NAME},
    "to":          [{"email": <recipient>}],
    "subject":     <subject>,
    "htmlContent": <html>,
    "attachment":  [{"name": <filename>, "content": <base64>}]
  }

Brevo answers 201 with {"messageId": "<...>"} on success.
"""

import logging

import httpx

from send_bridge.config import Settings
from send_bridge.models.send import DeliveryPayload
from send_bridge.services.errors import ConfigurationError, RemoteServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Brevo"


class BrevoClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http = http_client

    def build_payload(self, delivery: DeliveryPayload) -> dict:
        return {
            "sender": {
                "email": self._settings.brevo_sender_email,
                "name": self._settings.brevo_sender_name,
            },
            "to": [{"email": delivery.to_email}],
            "subject": delivery.subject,
            "htmlContent": delivery.html,
            "attachment": [
                {"name": delivery.attachment_name, "content": delivery.attachment_b64}
            ],
        }

    async def send_email(self, delivery: DeliveryPayload) -> dict:
        """
        Send the email and return Brevo's parsed JSON response.

        Raises:
            ConfigurationError: BREVO_API_KEY or BREVO_SENDER_EMAIL is not configured.
            RemoteServiceError: Non-2xx response, timeout, or transport error.
        """
        api_key = self._settings.brevo_api_key
        if not api_key:
            raise ConfigurationError("Missing BREVO_API_KEY")
        if not self._settings.brevo_sender_email:
            raise ConfigurationError("Missing BREVO_SENDER_EMAIL")

        try:
            response = await self._http.post(
                self._settings.brevo_api_url,
                json=self.build_payload(delivery),
                headers={"api-key": api_key, "content-type": "application/json"},
                timeout=self._settings.timeout_seconds,
            )
        except httpx.TimeoutException:
            raise RemoteServiceError(
                SERVICE_NAME, f"send timed out after {self._settings.timeout_ms}ms"
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(SERVICE_NAME, f"send request failed: {e}")

        if not response.is_success:
            body = response.text[:200]
            raise RemoteServiceError(
                SERVICE_NAME,
                f"send returned HTTP {response.status_code}" + (f": {body}" if body else ""),
                status_code=response.status_code,
            )

        logger.info(f"Brevo accepted email with attachment {delivery.attachment_name!r}")
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            # Already delivered; keep the raw body rather than report a failure.
            return {"raw": response.text}
        return data if isinstance(data, dict) else {"raw": data}
