from typing import List, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup


def format_count(count: int) -> str:
    count_text = str(count)
    if count > 1000:
        if count % 1000 >= 100:
            count_text = f'{count / 1000:.1f}k'
        else:
            count_text = f'{count // 1000}k'
    return count_text


def gen_buttons(reactions: List[str], tally: List[int]):
    result = []
    for index, (text, count) in enumerate(zip(reactions, tally)):
        result.append(InlineKeyboardButton(
            f'{text} {format_count(count)}',
            callback_data=str(index),
        ))
    return result


def split_to_columns(lines: list, max_cols: int):
    res = []
    while lines:
        line = lines[:max_cols]
        res.append(line)
        lines = lines[max_cols:]
    return res


def make_reactions_keyboard(
    reactions: List[str],
    tally: Optional[List[int]] = None,
    max_cols=5,
) -> InlineKeyboardMarkup:
    """
    Make keyboard with button for every reaction in the same order.
    Button shows reaction and its count, callback data is index of reaction.
    Missing tally means that nobody voted yet.
    """
    if tally is None:
        tally = [0] * len(reactions)
    if len(tally) != len(reactions):
        raise ValueError(f"Tally {tally} doesn't match reactions {reactions}.")
    buttons = gen_buttons(reactions, tally)
    keyboard = split_to_columns(buttons, max_cols)
    return InlineKeyboardMarkup(keyboard)
