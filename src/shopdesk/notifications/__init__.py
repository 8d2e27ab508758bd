"""Outbound notification channels."""

from shopdesk.notifications.telegram import TelegramNotifier

__all__ = ["TelegramNotifier"]
