"""
Send-gateway transport for delivering scheduled messages.

Posts each message to an HTTP gateway that fronts the chat network.
Requests are authenticated with an API key and an HMAC-SHA256 signature
of the exact JSON body.
"""

import hashlib
import hmac
import json
import logging

import requests

from core.exceptions import TransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class GatewayTransport:
    """Deliver messages via the HTTP send gateway."""

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        hmac_secret: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize with gateway credentials.

        Raises:
            ValueError: If any credential is empty
        """
        if not gateway_url:
            raise ValueError("gateway_url is required")
        if not api_key:
            raise ValueError("api_key is required")
        if not hmac_secret:
            raise ValueError("hmac_secret is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.timeout = timeout

    def sign(self, payload_json: str) -> str:
        return hmac.new(
            self.hmac_secret.encode("utf-8"),
            payload_json.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def send(self, recipient: str, text: str) -> None:
        """
        Send one message.

        Raises:
            TransportError: On connection failure, timeout, invalid response,
                non-200 status or a response without success=true
        """
        payload_json = json.dumps(
            {"recipient": recipient, "text": text},
            separators=(",", ":"),
            ensure_ascii=False,
        )

        headers = {
            "Content-Type": "application/json",
            "X-API-Key": self.api_key,
            "X-Signature": self.sign(payload_json),
        }

        try:
            response = requests.post(
                self.gateway_url,
                data=payload_json.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Send gateway connection failed: {e}")
            raise TransportError(f"Connection failed: {e}")

        try:
            response_data = response.json()
        except ValueError:
            logger.error(f"Send gateway returned invalid JSON: {response.text}")
            raise TransportError(f"Invalid response from gateway (HTTP {response.status_code})")

        if not isinstance(response_data, dict):
            logger.error(f"Send gateway returned a non-object body: {response.text}")
            raise TransportError(f"Unexpected response body from gateway (HTTP {response.status_code})")

        if response.status_code != 200 or not response_data.get("success"):
            error_msg = response_data.get("message", "Unknown error")
            logger.error(f"Send gateway error: {error_msg}")
            raise TransportError(f"Gateway error: {error_msg}")

        logger.info(f"Message delivered to {recipient}")
