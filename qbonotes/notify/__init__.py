"""Outbound notifications for new notes."""

from qbonotes.notify.slack import SlackNotificationError, SlackNotifier, build_note_message

__all__ = ["SlackNotificationError", "SlackNotifier", "build_note_message"]
