import itertools

import pytest

from bot.client import Client

SENDING_METHODS = {'sendMessage', 'sendPhoto', 'sendAnimation', 'forwardMessage'}


@pytest.fixture
def mock_client(mocker, create_tg_chat, create_tg_message):
    """
    Patch Client.call.
    Sending methods answer with new message in requested chat, message IDs go from 1000.
    """
    ids = itertools.count(1000)

    def call(method, **params):
        if method in SENDING_METHODS:
            chat = create_tg_chat(id=params['chat_id'])
            return create_tg_message(message_id=next(ids), chat=chat)
        if method == 'getUpdates':
            return ()
        return True

    return mocker.patch.object(Client, 'call', side_effect=call)
