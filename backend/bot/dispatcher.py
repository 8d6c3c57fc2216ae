import logging
from typing import Optional

from django.conf import settings
from telegram import Update

from .context import BotContext
from .errors import ConsistencyError
from .handlers import handle_button_callback, handle_message, handle_unsupported
from .updates import UpdateKind, get_update_kind

logger = logging.getLogger(__name__)

HANDLERS = {
    UpdateKind.message: handle_message,
    UpdateKind.callback_query: handle_button_callback,
}


async def process_update(update: Update, context: BotContext) -> int:
    """Pass update to its handler. Return ID of processed update."""
    if update.update_id is None:
        raise ConsistencyError(f"Update without ID: {update}")
    kind = get_update_kind(update)
    logger.debug(f"☎️  {kind} {update.update_id}")
    logger.debug(f"📑\n{update}")
    handler = HANDLERS.get(kind, handle_unsupported)
    await handler(update, context)
    return update.update_id


class Poller:
    """
    Long polling with offset held in memory.
    Offset moves past update only after update was processed,
    so update that crashed the bot will be received again after restart.
    There must be only one poller per bot token.
    """

    def __init__(self, context: BotContext, timeout: Optional[int] = None):
        self.context = context
        self.timeout = settings.TG_POLL_TIMEOUT if timeout is None else timeout
        self.offset: Optional[int] = None

    async def poll(self) -> int:
        """Fetch and process one batch of updates. Return size of the batch."""
        params = {'timeout': self.timeout}
        # first request starts from the oldest update telegram still keeps
        if self.offset is not None:
            params['offset'] = self.offset
        updates = await self.context.client.call('getUpdates', **params)
        if not updates:
            logger.debug('No updates')
        for update in updates:
            update_id = await process_update(update, self.context)
            self.offset = max(self.offset or 0, update_id + 1)
        return len(updates)

    async def run(self):
        logger.info(f'start polling... {self.context}')
        while True:
            await self.poll()


async def run(context: BotContext):
    async with context.client:
        await Poller(context).run()
