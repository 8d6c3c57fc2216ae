import logging
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError, TimedOut
from telegram.request import HTTPXRequest

logger = logging.getLogger(__name__)


def make_proxy_url(address: str) -> Optional[str]:
    """Turn `host:port` into socks5 url. Empty address means no proxy."""
    if not address:
        return None
    if '://' not in address:
        return f'socks5://{address}'
    return address


class Client:
    """
    Calls Bot API methods by their API names, e.g. `sendMessage` or `getUpdates`.
    Every request goes through the same proxy (if any).

    Errors are raised as is:
        - NetworkError (TimedOut included) if telegram wasn't reached
        - other TelegramError if telegram answered with failure, with its description
    """

    def __init__(self, token: str, proxy: str = ''):
        self.proxy = make_proxy_url(proxy)
        self.bot = Bot(
            token,
            request=HTTPXRequest(proxy=self.proxy),
            get_updates_request=HTTPXRequest(proxy=self.proxy),
        )

    async def __aenter__(self):
        await self.bot.initialize()
        return self

    async def __aexit__(self, *exc_info):
        await self.bot.shutdown()

    async def call(self, method: str, **params):
        logger.debug(f"📡 {method}: {params}")
        sender = getattr(self.bot, method)
        return await sender(**params)

    async def call_best_effort(self, method: str, **params):
        """Same as `call` but failure is only logged."""
        try:
            return await self.call(method, **params)
        except TimedOut:
            logger.debug(f"{method}: timeout")
        except TelegramError as e:
            logger.warning(f"😡 {method}: {e}")
