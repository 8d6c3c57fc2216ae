from typing import List, Optional

from django.conf import settings
from telegram import InlineKeyboardMarkup

from .client import Client
from .markup import make_reactions_keyboard


class BotContext:
    """Created once on start up and passed to every handler."""

    def __init__(
        self,
        client: Client,
        chat_id: int,
        reactions: Optional[List[str]] = None,
        prompt: Optional[str] = None,
        columns: Optional[int] = None,
    ):
        self.client = client
        self.chat_id = chat_id
        self.reactions = list(reactions or settings.REACTIONS)
        self.prompt = prompt or settings.UNSUPPORTED_PROMPT
        self.columns = columns or settings.KEYBOARD_COLUMNS

    def make_keyboard(self, tally: Optional[List[int]] = None) -> InlineKeyboardMarkup:
        return make_reactions_keyboard(self.reactions, tally, max_cols=self.columns)

    def __str__(self):
        return f"BotContext({self.chat_id}, {'/'.join(self.reactions)})"
