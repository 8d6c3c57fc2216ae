import asyncio

from django.conf import settings
from django.core.management import BaseCommand, call_command

from bot.client import Client
from bot.context import BotContext
from bot.dispatcher import run


class Command(BaseCommand):
    help = (
        'Start bot: repost messages into target chat and count reactions. '
        'Database is taken from DATABASE_URL.'
    )

    def add_arguments(self, parser):
        parser.add_argument('--token', default=settings.TG_BOT_TOKEN, help="Bot token.")
        parser.add_argument(
            '--chat',
            type=int,
            default=settings.TG_TARGET_CHAT_ID,
            help="ID of chat to repost messages to.",
        )
        parser.add_argument('--proxy', default=settings.TG_PROXY_URL, help="SOCKS5 proxy address.")

    def handle(self, *args, **options):
        token = options.get('token')
        chat_id = options.get('chat')
        proxy = options.get('proxy') or ''
        if not settings.DATABASE_URL or not token or chat_id is None:
            self.print_help('manage.py', 'runbot')
            self.stderr.write(self.style.ERROR("DATABASE_URL, token and chat are required."))
            return

        call_command('migrate', interactive=False, verbosity=0)
        context = BotContext(Client(token, proxy), chat_id)
        asyncio.run(run(context))
