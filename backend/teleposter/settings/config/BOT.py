from os import getenv

TG_BOT_TOKEN = getenv('TG_BOT_TOKEN')
TG_TARGET_CHAT_ID = getenv('TG_TARGET_CHAT_ID')
TG_PROXY_URL = getenv('TG_PROXY_URL', '')
TG_POLL_TIMEOUT = int(getenv('TG_POLL_TIMEOUT', 600))  # seconds, server side

# reaction kind is the index of the symbol in this list
REACTIONS = getenv('REACTIONS', '🍰 🤔 [|||]').split()
KEYBOARD_COLUMNS = int(getenv('KEYBOARD_COLUMNS', 5))
UNSUPPORTED_PROMPT = getenv('UNSUPPORTED_PROMPT', 'did you like it?')
