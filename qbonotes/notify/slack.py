"""
Slack notification for newly submitted transaction notes.

Delivery fans out to an incoming webhook and/or ``chat.postMessage`` for each
configured channel. Callers treat every failure as non-fatal.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import requests

from qbonotes.config import DEFAULT_SLACK_DISPLAY_TIMEZONE, HTTP_TIMEOUT_SECONDS, Settings
from qbonotes.notes.models import NotePayload
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter
from qbonotes.reports.windowing import get_zone
from qbonotes.utils.timestamps import utc_now

logger = get_logger(__name__)

SLACK_POST_MESSAGE_URL = "https://slack.com/api/chat.postMessage"

TYPE_EMOJI = {
    "invoice": "📄",
    "expense": "💸",
    "bill": "🧾",
    "payment": "💳",
    "journalentry": "📝",
}
DEFAULT_EMOJI = "📋"


class SlackNotificationError(RuntimeError):
    """Raised when any configured Slack destination rejects the message."""


def format_currency(amount: float) -> str:
    return f"-${abs(amount):,.2f}" if amount < 0 else f"${amount:,.2f}"


def type_emoji(transaction_type: str) -> str:
    return TYPE_EMOJI.get(transaction_type.lower(), DEFAULT_EMOJI)


def number_field_label(transaction_type: str) -> str:
    kind = transaction_type.lower()
    if kind == "invoice":
        return "Invoice Number"
    if kind in ("expense", "bill"):
        return "Bill/Ref Number"
    return "Number"


def counterparty_label(transaction_type: str) -> str:
    return "Customer" if transaction_type == "Invoice" else "Vendor/Payee"


def format_submitted_at(moment: datetime, tz_name: str) -> str:
    local = moment.astimezone(get_zone(tz_name))
    return f"{local:%b} {local.day}, {local:%Y, %I:%M %p %Z}"


def _field(label: str, value: str) -> dict[str, str]:
    return {"type": "mrkdwn", "text": f"*{label}:*\n{value}"}


def build_note_message(
    payload: NotePayload,
    submitted_at: datetime | None = None,
    display_timezone: str = DEFAULT_SLACK_DISPLAY_TIMEZONE,
) -> dict[str, Any]:
    """Block Kit message announcing a new note."""
    amount = format_currency(payload.amount)
    blocks: list[dict[str, Any]] = [
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"{type_emoji(payload.transaction_type)} *New Transaction Note Added*",
            },
        },
        {
            "type": "section",
            "fields": [
                _field("Transaction Type", payload.transaction_type),
                _field("Amount", amount),
                _field(
                    counterparty_label(payload.transaction_type),
                    payload.customer_vendor or "Not specified",
                ),
                _field("Date", payload.date or "Not specified"),
            ],
        },
        {
            "type": "section",
            "fields": [
                _field(
                    number_field_label(payload.transaction_type),
                    payload.invoice_number or "Not specified",
                ),
                _field("Created By", payload.created_by or "Unknown"),
            ],
        },
    ]

    if payload.transaction_id:
        blocks.append({"type": "section", "fields": [_field("Transaction ID", payload.transaction_id)]})

    blocks.append(
        {"type": "section", "text": {"type": "mrkdwn", "text": f'*Note:*\n_"{payload.note}"_'}}
    )
    blocks.append(
        {
            "type": "section",
            "text": {
                "type": "mrkdwn",
                "text": f"<{payload.transaction_url}|🔗 View in QuickBooks Online>",
            },
        }
    )
    blocks.append(
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"📅 Submitted: {format_submitted_at(submitted_at or utc_now(), display_timezone)}",
                }
            ],
        }
    )

    return {
        "text": f"New Transaction Note: {payload.transaction_type} - {amount}",
        "blocks": blocks,
    }


class SlackNotifier:
    """
    Posts note announcements to Slack.

    Nothing configured means every notify() is a logged no-op.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        bot_token: str | None = None,
        channels: list[str] | None = None,
        display_timezone: str = DEFAULT_SLACK_DISPLAY_TIMEZONE,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.webhook_url = webhook_url
        self.bot_token = bot_token
        self.channels = list(channels or [])
        self.display_timezone = display_timezone
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: requests.Session | None = None) -> SlackNotifier:
        return cls(
            webhook_url=settings.slack_webhook_url,
            bot_token=settings.slack_bot_token,
            channels=settings.slack_channels,
            display_timezone=settings.slack_display_timezone,
            timeout=settings.slack_timeout_seconds,
            session=session,
        )

    @property
    def configured(self) -> bool:
        return bool(self.webhook_url or (self.bot_token and self.channels))

    def _post_webhook(self, message: dict[str, Any]) -> None:
        response = self.session.post(self.webhook_url, json=message, timeout=self.timeout)
        if response.status_code >= 400:
            raise SlackNotificationError(
                f"Slack webhook failed: {response.status_code} {response.reason}"
            )

    def _post_channel(self, channel: str, message: dict[str, Any]) -> None:
        response = self.session.post(
            SLACK_POST_MESSAGE_URL,
            headers={"Authorization": f"Bearer {self.bot_token}"},
            json={"channel": channel, **message},
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise SlackNotificationError(
                f"chat.postMessage to {channel} failed: {response.status_code} {response.reason}"
            )
        body = response.json()
        if not body.get("ok", False):
            raise SlackNotificationError(
                f"chat.postMessage to {channel} rejected: {body.get('error', 'unknown_error')}"
            )

    def notify(self, payload: NotePayload) -> None:
        """
        Announce a note on every configured destination.

        Every destination is attempted even when an earlier one fails.

        Raises:
            SlackNotificationError: If at least one destination failed

        Side Effects:
            - HTTP POSTs to Slack
        """
        if not self.configured:
            logger.warning("Slack not configured, skipping notification")
            return

        message = build_note_message(payload, display_timezone=self.display_timezone)
        failures: list[str] = []

        if self.webhook_url:
            try:
                self._post_webhook(message)
            except (requests.exceptions.RequestException, SlackNotificationError) as e:
                failures.append(f"webhook: {e}")

        if self.bot_token:
            for channel in self.channels:
                try:
                    self._post_channel(channel, message)
                except (requests.exceptions.RequestException, SlackNotificationError, ValueError) as e:
                    failures.append(f"{channel}: {e}")

        if failures:
            counter("slack.failed")
            raise SlackNotificationError("; ".join(failures))

        counter("slack.sent")
        logger.info("Slack notification sent")
