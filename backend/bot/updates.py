from enum import Enum, auto
from typing import Optional

from telegram import Message as TGMessage, Update

from .errors import ConsistencyError

# content which can be reposted with keyboard, in order of precedence
MESSAGE_TYPES = [
    'text',
    'photo',
    'animation',
]


class UpdateKind(Enum):
    message = auto()
    edited_message = auto()
    channel_post = auto()
    edited_channel_post = auto()
    callback_query = auto()
    inline_query = auto()
    chosen_inline_result = auto()
    shipping_query = auto()
    pre_checkout_query = auto()
    other = auto()

    def __str__(self):
        return self._name_


PAYLOAD_KINDS = [kind for kind in UpdateKind if kind is not UpdateKind.other]


def get_update_kind(update: Update) -> UpdateKind:
    """Find out which payload update holds. Update can't hold more than one."""
    kinds = [kind for kind in PAYLOAD_KINDS if getattr(update, kind.name, None) is not None]
    if len(kinds) > 1:
        names = ', '.join(map(str, kinds))
        raise ConsistencyError(f"Update {update.update_id} holds several payloads: {names}.")
    if kinds:
        return kinds[0]
    return UpdateKind.other


def get_message_type(msg: TGMessage) -> Optional[str]:
    for field in MESSAGE_TYPES:
        if getattr(msg, field, None):
            return field
