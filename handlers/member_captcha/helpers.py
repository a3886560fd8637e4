from typing import Tuple

from aiogram import types
from aiogram.utils.markdown import hlink

from .config import BUTTON_TEXT, WELCOME_TEXT


def build_captcha_message(member: types.User, timeout: int) -> Tuple[str, types.InlineKeyboardMarkup]:
    """
    构建新用户验证信息的按钮和文字内容

    按钮的 callback_data 不会被解析，只是 Telegram 要求不能为空
    """
    mention = hlink(member.full_name, f"tg://user?id={member.id}")
    content = WELCOME_TEXT % {"mention": mention, "timeout": timeout}

    button = types.InlineKeyboardButton(text=BUTTON_TEXT, callback_data=str(member.id))

    return content, types.InlineKeyboardMarkup(inline_keyboard=[[button]])
