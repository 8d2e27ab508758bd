"""Telegram bot notifications for sales and purchases."""

import logging
from decimal import Decimal
from typing import Optional

import requests

from shopdesk.core.formatting import format_currency

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.telegram.org"


class TelegramNotifier:
    """
    Posts short messages to a Telegram chat.

    Every method returns True on success and False otherwise; failures are
    logged, never raised, so callers can fire and forget.
    """

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        http_session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self._bot_token = bot_token or ""
        self._chat_id = chat_id or ""
        self._http = http_session or requests.Session()
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._bot_token and self._chat_id)

    def send_sale_notification(
        self,
        description: str,
        profit: Decimal,
        daily_profit: Optional[Decimal] = None,
    ) -> bool:
        message = f"{description} vendido! Lucro {format_currency(profit)} 💰"
        if daily_profit is not None and daily_profit > 0:
            message += f"\n\n💲 Lucro do dia: {format_currency(daily_profit)}"
        return self._send(message)

    def send_purchase_notification(self, user_name: str, supplier_name: str, total: Decimal) -> bool:
        return self._send(
            f"Nova compra lançada no estoque por {user_name} 📦 "
            f"{supplier_name} - {format_currency(total)}"
        )

    def test_connection(self) -> bool:
        return self._send("🔔 Teste de Conexão\n\nA integração com o Telegram está funcionando! ✅")

    def _send(self, text: str) -> bool:
        if not self.is_configured:
            logger.warning("Telegram credentials not configured. Skipping notification.")
            return False

        url = f"{API_BASE_URL}/bot{self._bot_token}/sendMessage"
        try:
            response = self._http.post(
                url,
                json={"chat_id": self._chat_id, "text": text},
                timeout=self._timeout,
            )
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Error sending Telegram notification: %s", e)
            return False

        if not isinstance(result, dict):
            logger.error("Telegram notification failed: unexpected response %r", result)
            return False
        if not result.get("ok"):
            logger.error("Telegram notification failed: %s", result.get("description", result))
            return False
        return True
