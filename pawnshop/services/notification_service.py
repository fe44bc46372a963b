"""
SMS notifications sent through an HTTP SMS gateway.

Without an API token the service runs in mock mode: messages are logged and
reported as sent, which keeps local development and tests offline.
"""

import logging
from datetime import datetime
from typing import Optional
import httpx
from pawnshop.core.config import Settings

logger = logging.getLogger(__name__)


def _format_amount(amount: float) -> str:
    return f"{amount:,.2f}".rstrip("0").rstrip(".")


class NotificationService:
    """Service for sending SMS messages to customers."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        sender_id: Optional[str] = None,
        shop_name: str = "Pawn Shop",
        timeout: float = 30.0,
    ):
        self.api_url = api_url
        self.api_token = api_token
        self.sender_id = sender_id
        self.shop_name = shop_name
        self.timeout = timeout

        if not (self.api_url and self.api_token):
            logger.warning(
                "SMS gateway not configured (SMS_API_URL / SMS_API_TOKEN); messages will only be logged"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationService":
        return cls(
            api_url=settings.SMS_API_URL,
            api_token=settings.SMS_API_TOKEN,
            sender_id=settings.SMS_SENDER_ID,
            shop_name=settings.SHOP_NAME,
        )

    @property
    def is_mock(self) -> bool:
        return not (self.api_url and self.api_token)

    @staticmethod
    def _sanitize_message(message: str) -> str:
        """Reduce a message to plain ASCII so gateways do not switch to unicode encoding."""
        replacements = {
            '₹': 'Rs. ',
            '’': "'",
            '‘': "'",
            '“': '"',
            '”': '"',
            '–': '-',
            '—': '-',
        }
        for old, new in replacements.items():
            message = message.replace(old, new)

        return ''.join(char for char in message if ord(char) < 128)

    @staticmethod
    def _normalize_phone_number(phone_number: str) -> str:
        """Strip separators, keeping an optional leading +. Raises ValueError when nothing usable is left."""
        if not phone_number:
            raise ValueError("Phone number cannot be empty")

        cleaned = phone_number.replace(" ", "").replace("-", "").replace("(", "").replace(")", "")
        digits = cleaned[1:] if cleaned.startswith("+") else cleaned

        if not digits.isdigit() or len(digits) < 7:
            raise ValueError("Phone number must contain at least 7 digits")

        return cleaned

    async def send_sms(self, phone_number: str, message: str) -> dict:
        """
        Send an SMS message.

        Args:
            phone_number: Recipient's phone number
            message: SMS message content

        Returns:
            dict: success flag, normalized phone and the gateway message id (if any)

        Raises:
            ValueError: If the phone number is unusable
            httpx.HTTPError: If the gateway request fails
        """
        normalized_number = self._normalize_phone_number(phone_number)
        sanitized_message = self._sanitize_message(message)

        if self.is_mock:
            logger.info(f"[SMS mock] to {normalized_number[:5]}...***: {sanitized_message}")
            return {"success": True, "mock": True, "phone": normalized_number}

        logger.info(
            f"Sending SMS to {normalized_number[:5]}...***. "
            f"Message length: {len(sanitized_message)} chars, Sender: {self.sender_id}"
        )

        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json"
        }
        payload = {
            "recipient": normalized_number,
            "sender_id": self.sender_id,
            "type": "plain",
            "message": sanitized_message
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.api_url, headers=headers, json=payload)
            response.raise_for_status()
            response_data = response.json()

        data = response_data.get("data") or {}
        logger.info(f"SMS sent to {normalized_number[:5]}...***. UID: {data.get('uid')}")
        return {
            "success": True,
            "mock": False,
            "phone": normalized_number,
            "message_id": data.get("uid"),
        }

    def loan_created_message(self, customer_name: str, amount: float, start_date: datetime, item_description: str) -> str:
        return (
            f"Dear {customer_name}, Your loan of ₹{_format_amount(amount)} for {item_description} "
            f"has been created on {start_date.strftime('%d/%m/%Y')}. Thank you - {self.shop_name}."
        )

    def payment_recorded_message(self, customer_name: str, amount: float, paid_at: datetime, loan_id: str) -> str:
        return (
            f"Dear {customer_name}, Your payment of ₹{_format_amount(amount)} for loan {loan_id[-6:]} "
            f"has been recorded on {paid_at.strftime('%d/%m/%Y')}. Thank you - {self.shop_name}."
        )

    def otp_message(self, otp: str, ttl_minutes: int) -> str:
        return (
            f"Your OTP for {self.shop_name} login is {otp}. "
            f"Valid for {ttl_minutes} minutes. Do not share this code."
        )
