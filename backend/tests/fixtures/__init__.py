from .mockers import mock_client
from .tg import (
    create_callback_query,
    create_context,
    create_tg_chat,
    create_tg_message,
    create_tg_user,
    create_update,
)
