from typing import Callable

import pytest
from _pytest.fixtures import FixtureRequest
from telegram import (
    CallbackQuery,
    Chat as TGChat,
    Message as TGMessage,
    Update,
    User as TGUser,
)

from bot.client import Client
from bot.context import BotContext
from .utils import TARGET_CHAT_ID, TOKEN, append_to_cls, decode_tg_object, get_id


@pytest.fixture(scope='class')
def create_tg_user(request: FixtureRequest) -> Callable:
    def _create_tg_user(**kwargs):
        fields = {
            'id': get_id(),
            'first_name': 'user',
            'is_bot': False,
            **kwargs,
        }
        return TGUser(**fields)

    return append_to_cls(request, _create_tg_user)


@pytest.fixture(scope='class')
def create_tg_chat(request: FixtureRequest) -> Callable:
    def _create_tg_chat(**kwargs):
        data = {
            'id': -100000000000,
            'type': TGChat.SUPERGROUP,
            'title': 'test chat',
            'username': 'testchat',
            **kwargs,
        }
        return TGChat.de_json(data, None)

    return append_to_cls(request, _create_tg_chat)


@pytest.fixture(scope='class')
def create_tg_message(request: FixtureRequest, create_tg_user, create_tg_chat) -> Callable:
    def _create_tg_message(user=None, chat=None, **kwargs):
        user = decode_tg_object(user, create_tg_user().to_dict())
        chat = decode_tg_object(chat, create_tg_chat().to_dict())
        data = {
            'message_id': get_id(),
            'date': 1564646464,
            'from': user,
            'chat': chat,
            **kwargs,
        }
        return TGMessage.de_json(data, None)

    return append_to_cls(request, _create_tg_message)


@pytest.fixture(scope='class')
def create_callback_query(request: FixtureRequest, create_tg_user) -> Callable:
    def _create_callback_query(message=None, data='0', user=None):
        fields = {
            'id': str(get_id()),
            'from': decode_tg_object(user, create_tg_user().to_dict()),
            'chat_instance': '-42',
            'data': data,
        }
        if message:
            fields['message'] = decode_tg_object(message)
        return CallbackQuery.de_json(fields, None)

    return append_to_cls(request, _create_callback_query)


@pytest.fixture(scope='class')
def create_update(request: FixtureRequest) -> Callable:
    def _create_update(update_id=None, **payloads):
        data = {'update_id': update_id or get_id()}
        for key, payload in payloads.items():
            data[key] = decode_tg_object(payload)
        return Update.de_json(data, None)

    return append_to_cls(request, _create_update)


@pytest.fixture(scope='class')
def create_context(request: FixtureRequest) -> Callable:
    def _create_context(client=None, chat_id=TARGET_CHAT_ID, reactions=('a', 'b', 'c'), **kwargs):
        return BotContext(client or Client(TOKEN), chat_id, reactions=list(reactions), **kwargs)

    return append_to_cls(request, _create_context)
