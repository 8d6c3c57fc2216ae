import logging
from typing import List

from asgiref.sync import sync_to_async
from telegram import CallbackQuery, Message as TGMessage, ReplyParameters, Update

from core.models import Author, Like, UnsupportedMessage
from .context import BotContext
from .errors import ConsistencyError, DecodeError
from .updates import get_message_type, get_update_kind

logger = logging.getLogger(__name__)

SENDERS = {
    'text': 'sendMessage',
    'photo': 'sendPhoto',
    'animation': 'sendAnimation',
}


def get_message_config(msg: TGMessage, msg_type: str) -> dict:
    if msg_type == 'text':
        return {
            'text': msg.text_html,
            'parse_mode': 'HTML',
        }
    if msg_type == 'photo':
        config = {'photo': msg.photo[0].file_id}
    else:
        animation = msg.animation
        config = {
            'animation': animation.file_id,
            'width': animation.width,
            'height': animation.height,
            'duration': animation.duration,
        }
    if msg.caption:
        config.update({
            'caption': msg.caption_html,
            'parse_mode': 'HTML',
        })
    return config


async def repost_message(msg: TGMessage, context: BotContext, msg_type: str, reply_markup):
    return await context.client.call(
        SENDERS[msg_type],
        chat_id=context.chat_id,
        reply_markup=reply_markup,
        **get_message_config(msg, msg_type),
    )


async def repost_unsupported(msg: TGMessage, context: BotContext, reply_markup):
    """
    Forward message as is and reply to it with prompt that holds the keyboard.
    Votes are counted for prompt.
    """
    forwarded = await context.client.call(
        'forwardMessage',
        chat_id=context.chat_id,
        from_chat_id=msg.chat_id,
        message_id=msg.message_id,
    )
    prompt = await context.client.call(
        'sendMessage',
        chat_id=context.chat_id,
        text=context.prompt,
        reply_parameters=ReplyParameters(message_id=forwarded.message_id),
        reply_markup=reply_markup,
    )
    await sync_to_async(UnsupportedMessage.objects.link)(forwarded.message_id, prompt.message_id)
    return prompt


async def handle_message(update: Update, context: BotContext):
    """Repost message into target chat with empty reactions keyboard."""
    msg: TGMessage = update.message
    await sync_to_async(Author.objects.record)(msg.message_id, msg.chat_id)

    reply_markup = context.make_keyboard()
    msg_type = get_message_type(msg)
    logger.debug(f"msg_type: {msg_type}")
    if msg_type:
        sent_msg = await repost_message(msg, context, msg_type, reply_markup)
    else:
        logger.info(f"Unsupported message type, forwarding {msg.message_id}.")
        sent_msg = await repost_unsupported(msg, context, reply_markup)
    logger.debug(f"sent_msg: {sent_msg}")
    return sent_msg


def get_reaction_type(data, size: int) -> int:
    try:
        reaction_type = int(data)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"Bad callback data: {data!r}.") from e
    # keyboard never offers such buttons
    if not 0 <= reaction_type < size:
        raise ConsistencyError(f"Bad reaction type: {reaction_type}.")
    return reaction_type


async def reply_to_reaction(context: BotContext, query: CallbackQuery, reaction: str, reacted: bool):
    if reacted:
        reply = f"You reacted with {reaction}."
    else:
        reply = "You took your reaction back."
    await context.client.call_best_effort('answerCallbackQuery', callback_query_id=query.id, text=reply)


async def handle_button_callback(update: Update, context: BotContext) -> List[int]:
    """Toggle user's reaction and refresh keyboard of the message with the button."""
    query: CallbackQuery = update.callback_query
    msg = query.message
    if msg is None:
        raise ConsistencyError(f"Callback query {query.id} has no message.")
    reaction_type = get_reaction_type(query.data, len(context.reactions))
    reaction = context.reactions[reaction_type]
    user = query.from_user

    reacted = await sync_to_async(Like.objects.toggle)(msg.message_id, reaction_type, user.id)
    if reacted:
        logger.info(f"Reaction of <{user.first_name}> to {msg.message_id}: {reaction}")
    else:
        logger.info(f"Reaction of <{user.first_name}> to {msg.message_id}: not {reaction}")

    tally = await sync_to_async(Like.objects.tally)(msg.message_id, len(context.reactions))
    await reply_to_reaction(context, query, reaction, reacted)
    # vote is already saved, stale keyboard is not a reason to stop
    await context.client.call_best_effort(
        'editMessageReplyMarkup',
        chat_id=msg.chat.id,
        message_id=msg.message_id,
        reply_markup=context.make_keyboard(tally),
    )
    return tally


async def handle_unsupported(update: Update, _: BotContext):
    kind = get_update_kind(update)
    logger.info(f"Update {update.update_id} ({kind}) is not supported by the bot yet.")
