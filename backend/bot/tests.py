import itertools
from io import StringIO
from unittest.mock import call

import pytest
from asgiref.sync import async_to_sync
from django.core.management import call_command
from telegram import Bot, Update
from telegram.error import BadRequest, NetworkError, TimedOut

from bot.client import Client, make_proxy_url
from bot.context import BotContext
from bot.dispatcher import Poller, process_update
from bot.errors import ConsistencyError, DecodeError
from bot.markup import format_count, make_reactions_keyboard
from bot.updates import UpdateKind, get_message_type, get_update_kind
from core.models import Author, Like, UnsupportedMessage
from tests.fixtures.utils import TOKEN

PHOTO = [
    {'file_id': 'p1', 'file_unique_id': 'u1', 'width': 90, 'height': 90},
    {'file_id': 'p2', 'file_unique_id': 'u2', 'width': 800, 'height': 800},
]
ANIMATION = {
    'file_id': 'a1',
    'file_unique_id': 'ua',
    'width': 320,
    'height': 240,
    'duration': 3,
}
LOCATION = {'latitude': 50.45, 'longitude': 30.52}


def keyboard_texts(reply_markup):
    return [b.text for row in reply_markup.inline_keyboard for b in row]


def find_calls(mock, method):
    return [kwargs for args, kwargs in mock.call_args_list if args[0] == method]


class TestMarkup:
    def test_make_reactions_keyboard(self):
        kb = make_reactions_keyboard(['a', 'b', 'c']).inline_keyboard
        assert len(kb) == 1
        buttons = [(b.text, b.callback_data) for b in kb[0]]
        assert buttons == [('a 0', '0'), ('b 0', '1'), ('c 0', '2')]

    def test_make_reactions_keyboard_tally(self):
        kb = make_reactions_keyboard(['a', 'b', 'c'], [2, 0, 1])
        assert keyboard_texts(kb) == ['a 2', 'b 0', 'c 1']
        assert kb.to_json() == make_reactions_keyboard(['a', 'b', 'c'], [2, 0, 1]).to_json()

    def test_make_reactions_keyboard_columns(self):
        kb = make_reactions_keyboard(list('abcdef'), max_cols=5).inline_keyboard
        assert len(kb) == 2
        assert [b.callback_data for b in kb[0]] == ['0', '1', '2', '3', '4']
        assert [b.callback_data for b in kb[1]] == ['5']

    def test_make_reactions_keyboard_bad_tally(self):
        with pytest.raises(ValueError):
            make_reactions_keyboard(['a', 'b', 'c'], [1, 2])

    def test_format_count(self):
        assert format_count(0) == '0'
        assert format_count(1000) == '1000'
        assert format_count(20000) == '20k'
        assert format_count(20100) == '20.1k'


@pytest.mark.usefixtures('create_update', 'create_tg_message', 'create_callback_query')
class TestUpdates:
    def test_get_update_kind(self):
        msg = self.create_tg_message(text='foo')
        assert get_update_kind(self.create_update(message=msg)) == UpdateKind.message
        assert get_update_kind(self.create_update(edited_message=msg)) == UpdateKind.edited_message
        assert get_update_kind(self.create_update(channel_post=msg)) == UpdateKind.channel_post
        query = self.create_callback_query(message=msg)
        assert get_update_kind(self.create_update(callback_query=query)) == UpdateKind.callback_query
        assert get_update_kind(Update(1)) == UpdateKind.other

    def test_get_update_kind_several_payloads(self):
        msg = self.create_tg_message(text='foo')
        with pytest.raises(ConsistencyError):
            get_update_kind(Update(1, message=msg, edited_message=msg))

    def test_get_message_type(self):
        assert get_message_type(self.create_tg_message(text='foo')) == 'text'
        assert get_message_type(self.create_tg_message(photo=PHOTO)) == 'photo'
        assert get_message_type(self.create_tg_message(animation=ANIMATION)) == 'animation'
        assert get_message_type(self.create_tg_message(location=LOCATION)) is None


class TestClient:
    def test_make_proxy_url(self):
        assert make_proxy_url('') is None
        assert make_proxy_url('127.0.0.1:9050') == 'socks5://127.0.0.1:9050'
        assert make_proxy_url('socks5h://proxy:1080') == 'socks5h://proxy:1080'

    def test_call(self, mocker):
        send_message = mocker.patch.object(Bot, 'sendMessage', return_value='sent')
        client = Client(TOKEN)
        assert async_to_sync(client.call)('sendMessage', chat_id=1, text='hi') == 'sent'
        send_message.assert_awaited_once_with(chat_id=1, text='hi')

    def test_call_errors_are_raised(self, mocker):
        mocker.patch.object(Bot, 'sendMessage', side_effect=BadRequest('Chat not found'))
        client = Client(TOKEN)
        with pytest.raises(BadRequest, match='Chat not found'):
            async_to_sync(client.call)('sendMessage', chat_id=1, text='hi')

    def test_call_best_effort(self, mocker):
        client = Client(TOKEN)
        mocker.patch.object(Client, 'call', side_effect=BadRequest('Message is not modified'))
        assert async_to_sync(client.call_best_effort)('editMessageReplyMarkup') is None
        mocker.patch.object(Client, 'call', side_effect=TimedOut())
        assert async_to_sync(client.call_best_effort)('editMessageReplyMarkup') is None
        mocker.patch.object(Client, 'call', return_value=True)
        assert async_to_sync(client.call_best_effort)('editMessageReplyMarkup') is True


@pytest.mark.usefixtures(
    'create_context',
    'create_update',
    'create_tg_message',
    'create_tg_chat',
)
@pytest.mark.django_db
class TestHandleMessage:
    def process(self, context, chat_id=42, **kwargs):
        chat = self.create_tg_chat(id=chat_id, type='private', title=None, username=None)
        msg = self.create_tg_message(message_id=7, chat=chat, **kwargs)
        async_to_sync(process_update)(self.create_update(message=msg), context)

    def test_text(self, mock_client):
        context = self.create_context()
        self.process(context, text='a < b')

        assert list(Author.objects.values_list('post_id', 'author_id')) == [(7, 42)]
        mock_client.assert_awaited_once()
        args, kwargs = mock_client.call_args
        assert args == ('sendMessage',)
        assert kwargs['chat_id'] == context.chat_id
        assert kwargs['text'] == 'a &lt; b'
        assert kwargs['parse_mode'] == 'HTML'
        assert keyboard_texts(kwargs['reply_markup']) == ['a 0', 'b 0', 'c 0']

    def test_photo(self, mock_client):
        context = self.create_context()
        self.process(context, photo=PHOTO, caption='nice')

        args, kwargs = mock_client.call_args
        assert args == ('sendPhoto',)
        assert kwargs['photo'] == 'p1'
        assert kwargs['caption'] == 'nice'
        assert keyboard_texts(kwargs['reply_markup']) == ['a 0', 'b 0', 'c 0']

    def test_animation(self, mock_client):
        context = self.create_context()
        self.process(context, animation=ANIMATION)

        args, kwargs = mock_client.call_args
        assert args == ('sendAnimation',)
        assert kwargs['animation'] == 'a1'
        assert (kwargs['width'], kwargs['height']) == (320, 240)
        assert 'duration' in kwargs
        assert 'caption' not in kwargs

    def test_unsupported(self, mock_client):
        context = self.create_context(prompt='like?')
        self.process(context, location=LOCATION)

        methods = [args[0] for args, _ in mock_client.call_args_list]
        assert methods == ['forwardMessage', 'sendMessage']
        forward = find_calls(mock_client, 'forwardMessage')[0]
        assert forward == {'chat_id': context.chat_id, 'from_chat_id': 42, 'message_id': 7}
        prompt = find_calls(mock_client, 'sendMessage')[0]
        assert prompt['text'] == 'like?'
        assert prompt['reply_parameters'].message_id == 1000
        assert keyboard_texts(prompt['reply_markup']) == ['a 0', 'b 0', 'c 0']
        links = UnsupportedMessage.objects.values_list('forwarded_post_id', 'keyboard_post_id')
        assert list(links) == [(1000, 1001)]

    def test_redelivered_message(self, mock_client):
        context = self.create_context()
        self.process(context, text='foo')
        self.process(context, text='foo')
        assert Author.objects.filter(post_id=7).count() == 1

    def test_same_message_id_from_two_chats(self, mock_client):
        context = self.create_context()
        self.process(context, chat_id=42, text='foo')
        self.process(context, chat_id=43, text='bar')

        rows = Author.objects.order_by('author_id').values_list('post_id', 'author_id')
        assert list(rows) == [(7, 42), (7, 43)]
        assert len(find_calls(mock_client, 'sendMessage')) == 2

    def test_send_failure(self, mock_client):
        mock_client.side_effect = NetworkError('proxy is down')
        with pytest.raises(NetworkError):
            self.process(self.create_context(), text='foo')


@pytest.mark.usefixtures(
    'create_context',
    'create_update',
    'create_tg_message',
    'create_tg_chat',
    'create_tg_user',
    'create_callback_query',
)
@pytest.mark.django_db
class TestHandleButtonCallback:
    user_id = 555

    def press(self, context, message, data):
        query = self.create_callback_query(
            message=message,
            data=data,
            user=self.create_tg_user(id=self.user_id),
        )
        return async_to_sync(process_update)(self.create_update(callback_query=query), context)

    def posted_message(self, context, message_id=1000):
        chat = self.create_tg_chat(id=context.chat_id)
        return self.create_tg_message(message_id=message_id, chat=chat, text='foo')

    def test_vote(self, mock_client):
        context = self.create_context()
        msg = self.posted_message(context)
        self.press(context, msg, '1')

        assert Like.objects.tally(1000, 3) == [0, 1, 0]
        edit = find_calls(mock_client, 'editMessageReplyMarkup')[0]
        assert edit['chat_id'] == context.chat_id
        assert edit['message_id'] == 1000
        assert keyboard_texts(edit['reply_markup']) == ['a 0', 'b 1', 'c 0']
        answer = find_calls(mock_client, 'answerCallbackQuery')[0]
        assert answer['text'] == "You reacted with b."

    def test_vote_twice(self, mock_client):
        context = self.create_context()
        msg = self.posted_message(context)
        self.press(context, msg, '1')
        self.press(context, msg, '1')

        assert Like.objects.tally(1000, 3) == [0, 0, 0]
        edit = find_calls(mock_client, 'editMessageReplyMarkup')[-1]
        assert keyboard_texts(edit['reply_markup']) == ['a 0', 'b 0', 'c 0']
        answer = find_calls(mock_client, 'answerCallbackQuery')[-1]
        assert answer['text'] == "You took your reaction back."

    def test_change_vote(self, mock_client):
        context = self.create_context()
        msg = self.posted_message(context)
        self.press(context, msg, '0')
        self.press(context, msg, '2')
        assert Like.objects.tally(1000, 3) == [0, 0, 1]

    def test_out_of_range(self, mock_client):
        context = self.create_context()
        with pytest.raises(ConsistencyError):
            self.press(context, self.posted_message(context), '3')
        with pytest.raises(ConsistencyError):
            self.press(context, self.posted_message(context), '-1')
        assert not Like.objects.exists()
        assert not find_calls(mock_client, 'editMessageReplyMarkup')

    def test_bad_data(self, mock_client):
        context = self.create_context()
        with pytest.raises(DecodeError):
            self.press(context, self.posted_message(context), 'b')

    def test_no_message(self, mock_client):
        with pytest.raises(ConsistencyError):
            self.press(self.create_context(), None, '0')

    def test_markup_update_failure(self, mock_client):
        def call(method, **params):
            raise BadRequest('Message to edit not found')

        mock_client.side_effect = call
        context = self.create_context()
        self.press(context, self.posted_message(context), '0')
        assert Like.objects.tally(1000, 3) == [1, 0, 0]


@pytest.mark.usefixtures(
    'create_context',
    'create_update',
    'create_tg_message',
    'create_tg_chat',
    'create_tg_user',
    'create_callback_query',
)
@pytest.mark.django_db
class TestScenarios:
    def test_text_message_and_vote(self, mock_client):
        context = self.create_context()
        chat = self.create_tg_chat(id=42)
        msg = self.create_tg_message(message_id=7, chat=chat, text='hello')
        async_to_sync(process_update)(self.create_update(message=msg), context)

        assert Author.objects.filter(post_id=7, author_id=42).exists()
        args, kwargs = mock_client.call_args
        assert args == ('sendMessage',)
        assert keyboard_texts(kwargs['reply_markup']) == ['a 0', 'b 0', 'c 0']

        sent = self.create_tg_message(message_id=1000, chat=self.create_tg_chat(id=context.chat_id))
        query = self.create_callback_query(message=sent, data='1', user=self.create_tg_user(id=99))
        async_to_sync(process_update)(self.create_update(callback_query=query), context)

        assert Like.objects.tally(1000, 3) == [0, 1, 0]
        edit = find_calls(mock_client, 'editMessageReplyMarkup')[0]
        assert edit['message_id'] == 1000
        assert keyboard_texts(edit['reply_markup']) == ['a 0', 'b 1', 'c 0']

    def test_unsupported_message_and_vote(self, mock_client):
        context = self.create_context()
        msg = self.create_tg_message(message_id=7, location=LOCATION)
        async_to_sync(process_update)(self.create_update(message=msg), context)
        link = UnsupportedMessage.objects.get(forwarded_post_id=1000)
        prompt_id = link.keyboard_post_id
        assert prompt_id == 1001

        prompt = self.create_tg_message(
            message_id=prompt_id,
            chat=self.create_tg_chat(id=context.chat_id),
            text=context.prompt,
        )
        query = self.create_callback_query(message=prompt, data='2', user=self.create_tg_user(id=99))
        async_to_sync(process_update)(self.create_update(callback_query=query), context)

        assert Like.objects.tally(prompt_id, 3) == [0, 0, 1]
        assert Like.objects.tally(1000, 3) == [0, 0, 0]
        edit = find_calls(mock_client, 'editMessageReplyMarkup')[0]
        assert edit['message_id'] == prompt_id


@pytest.mark.usefixtures(
    'create_context',
    'create_update',
    'create_tg_message',
    'create_tg_chat',
    'create_tg_user',
    'create_callback_query',
)
@pytest.mark.django_db
class TestBotApi:
    """Handlers go through real telegram.Bot methods, only the HTTP layer is patched."""

    @pytest.fixture
    def mock_post(self, mocker):
        ids = itertools.count(1000)

        def post(endpoint, data=None, **kwargs):
            if endpoint in {'sendMessage', 'sendPhoto', 'sendAnimation', 'forwardMessage'}:
                return {
                    'message_id': next(ids),
                    'date': 1564646464,
                    'chat': {'id': data['chat_id'], 'type': 'supergroup'},
                }
            return True

        return mocker.patch.object(Bot, '_post', side_effect=post)

    def posts(self, mock_post):
        # endpoint, data
        return [
            (args[0], args[1] if len(args) > 1 else kwargs.get('data'))
            for args, kwargs in mock_post.call_args_list
        ]

    def send(self, context, **kwargs):
        chat = self.create_tg_chat(id=42, type='private', title=None, username=None)
        msg = self.create_tg_message(message_id=7, chat=chat, **kwargs)
        async_to_sync(process_update)(self.create_update(message=msg), context)

    def test_animation(self, mock_post):
        context = self.create_context(client=Client(TOKEN))
        self.send(context, animation=ANIMATION)

        [(endpoint, data)] = self.posts(mock_post)
        assert endpoint == 'sendAnimation'
        assert data['chat_id'] == context.chat_id
        assert data['animation'] == 'a1'

    def test_unsupported_and_vote(self, mock_post):
        context = self.create_context(client=Client(TOKEN))
        self.send(context, location=LOCATION)

        prompt = self.create_tg_message(
            message_id=1001,
            chat=self.create_tg_chat(id=context.chat_id),
            text=context.prompt,
        )
        query = self.create_callback_query(message=prompt, data='0', user=self.create_tg_user(id=99))
        async_to_sync(process_update)(self.create_update(callback_query=query), context)

        endpoints = [endpoint for endpoint, _ in self.posts(mock_post)]
        assert endpoints == ['forwardMessage', 'sendMessage', 'answerCallbackQuery', 'editMessageReplyMarkup']
        forward, reply = self.posts(mock_post)[:2]
        assert forward[1]['from_chat_id'] == 42
        assert reply[1]['reply_parameters'].message_id == 1000
        assert Like.objects.tally(1001, 3) == [1, 0, 0]


@pytest.mark.usefixtures('create_context', 'create_update', 'create_tg_message')
class TestPoller:
    def edited(self, update_id):
        return self.create_update(update_id=update_id, edited_message=self.create_tg_message(text='x'))

    def test_watermark(self, mock_client):
        mock_client.side_effect = [[self.edited(5), self.edited(6), self.edited(9)], []]
        poller = Poller(self.create_context(), timeout=600)

        assert async_to_sync(poller.poll)() == 3
        assert poller.offset == 10
        assert async_to_sync(poller.poll)() == 0
        assert poller.offset == 10
        assert mock_client.call_args_list == [
            call('getUpdates', timeout=600),
            call('getUpdates', timeout=600, offset=10),
        ]

    def test_stops_on_fatal_error(self, mock_client):
        msg = self.create_tg_message(text='x')
        mock_client.side_effect = [[self.edited(5), Update(6, message=msg, edited_message=msg), self.edited(7)]]
        poller = Poller(self.create_context(), timeout=600)
        with pytest.raises(ConsistencyError):
            async_to_sync(poller.poll)()
        assert poller.offset == 6

    def test_update_without_id(self, mock_client):
        msg = self.create_tg_message(text='x')
        mock_client.side_effect = [[Update(None, edited_message=msg)]]
        poller = Poller(self.create_context(), timeout=600)
        with pytest.raises(ConsistencyError):
            async_to_sync(poller.poll)()
        assert poller.offset is None

    def test_transport_error(self, mock_client):
        mock_client.side_effect = NetworkError('connection refused')
        poller = Poller(self.create_context(), timeout=600)
        with pytest.raises(NetworkError):
            async_to_sync(poller.poll)()
        assert poller.offset is None


class TestRunbot:
    def patch(self, mocker):
        run = mocker.patch('bot.management.commands.runbot.run')
        migrate = mocker.patch('bot.management.commands.runbot.call_command')
        return run, migrate

    def test_missing_options(self, mocker, settings, capsys):
        settings.DATABASE_URL = 'sqlite:///bot.sqlite3'
        settings.TG_BOT_TOKEN = None
        settings.TG_TARGET_CHAT_ID = None
        run, migrate = self.patch(mocker)

        call_command('runbot', stderr=StringIO())
        assert 'usage' in capsys.readouterr().out
        run.assert_not_called()
        migrate.assert_not_called()

    def test_missing_database(self, mocker, settings, capsys):
        settings.DATABASE_URL = None
        run, migrate = self.patch(mocker)

        call_command('runbot', token=TOKEN, chat=-100, stderr=StringIO())
        assert 'usage' in capsys.readouterr().out
        run.assert_not_called()
        migrate.assert_not_called()

    def test_run(self, mocker, settings):
        settings.DATABASE_URL = 'sqlite:///bot.sqlite3'
        run, migrate = self.patch(mocker)

        call_command('runbot', token=TOKEN, chat=-100, proxy='127.0.0.1:9050')
        migrate.assert_called_once_with('migrate', interactive=False, verbosity=0)
        run.assert_called_once()
        context = run.call_args[0][0]
        assert isinstance(context, BotContext)
        assert context.chat_id == -100
        assert context.client.proxy == 'socks5://127.0.0.1:9050'
