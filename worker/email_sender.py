"""Resend HTTP API client for transactional email.

Transient failures (network errors, 429 and 5xx responses) are retried with
exponential backoff; anything else surfaces as ``EmailSendError``.
"""

import logging
import os
from typing import Optional, Union

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ppc_contracts.core.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_TIMEOUT_S = float(os.environ.get("EMAIL_TIMEOUT_S", "15"))
EMAIL_MAX_RETRIES = int(os.environ.get("EMAIL_MAX_RETRIES", "3"))


class EmailSendError(RuntimeError):
    """Raised when an email cannot be delivered to the provider."""

    pass


class DomainVerificationError(EmailSendError):
    """Sender domain has not been verified with Resend."""

    pass


class TransientEmailError(EmailSendError):
    """Provider-side failure that is worth retrying."""

    pass


RETRYABLE_ERRORS = (TransientEmailError, httpx.TransportError)


def sender_address(from_email: Optional[str] = None) -> str:
    return f"{settings.EMAIL_SENDER_NAME} <{from_email or settings.RESEND_FROM_EMAIL}>"


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message") or data)
    return str(data)


def _make_retry_decorator():
    return retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        stop=stop_after_attempt(EMAIL_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        reraise=True,
    )


def _post(client: httpx.Client, api_key: str, payload: dict) -> dict:
    response = client.post(
        RESEND_API_URL,
        json=payload,
        headers={"Authorization": f"Bearer {api_key}"},
    )
    if response.is_success:
        return response.json()

    message = _error_message(response)
    if "not verified" in message:
        domain = payload["from"].rsplit("@", 1)[-1].rstrip(">")
        raise DomainVerificationError(
            f"Domain Verification Required: the email domain '{domain}' must be verified "
            f"in the Resend dashboard (https://resend.com/domains) before emails can be sent"
        )
    if response.status_code == 429 or response.status_code >= 500:
        raise TransientEmailError(f"Resend API error {response.status_code}: {message}")
    raise EmailSendError(f"Resend API error {response.status_code}: {message}")


def send_email(
    to: Union[str, list[str], None],
    subject: Optional[str],
    html: Optional[str],
    *,
    client: Optional[httpx.Client] = None,
    api_key: Optional[str] = None,
    from_email: Optional[str] = None,
) -> dict:
    """Send one HTML email through Resend.

    Args:
        to: Recipient address or list of addresses.
        subject: Subject line.
        html: HTML body.
        client: Optional httpx client (for testing).
        api_key: Overrides ``settings.RESEND_API_KEY``.
        from_email: Overrides ``settings.RESEND_FROM_EMAIL``.

    Returns:
        Provider response body (contains the message ``id``).

    Raises:
        EmailSendError: Missing fields, missing API key, or provider rejection
            after retries.
    """
    recipients = [to] if isinstance(to, str) else [r for r in (to or []) if r]
    if not recipients or not subject or not html:
        raise EmailSendError("Missing required fields: to, subject and html are all required")

    key = api_key or settings.RESEND_API_KEY
    if not key:
        raise EmailSendError("RESEND_API_KEY is not configured")

    payload = {
        "from": sender_address(from_email),
        "to": recipients,
        "subject": subject,
        "html": html,
    }

    owns_client = client is None
    actual_client = client if client is not None else httpx.Client(timeout=EMAIL_TIMEOUT_S)
    try:
        result = _make_retry_decorator()(_post)(actual_client, key, payload)
    except httpx.TransportError as e:
        raise EmailSendError(f"Could not reach Resend: {e}") from e
    finally:
        if owns_client:
            actual_client.close()

    logger.info("Sent email %r to %d recipient(s), id=%s", subject, len(recipients), result.get("id"))
    return result


__all__ = [
    "DomainVerificationError",
    "EmailSendError",
    "TransientEmailError",
    "send_email",
    "sender_address",
]
