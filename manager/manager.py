import os
import sys
from configparser import ConfigParser
from functools import wraps
from typing import Awaitable, List, Optional, TypeVar

import loguru
from aiogram import Bot, Dispatcher, types
from aiogram.exceptions import TelegramBadRequest

from .settings import SETTINGS_TEMPLATE

logger = loguru.logger

T = TypeVar("T")

# 禁言
MUTED = types.ChatPermissions(
    can_send_messages=False,
    can_send_audios=False,
    can_send_documents=False,
    can_send_photos=False,
    can_send_videos=False,
    can_send_video_notes=False,
    can_send_voice_notes=False,
    can_send_polls=False,
    can_send_other_messages=False,
    can_add_web_page_previews=False,
)

# 解除禁言
UNMUTED = types.ChatPermissions(
    can_send_messages=True,
    can_send_audios=True,
    can_send_documents=True,
    can_send_photos=True,
    can_send_videos=True,
    can_send_video_notes=True,
    can_send_voice_notes=True,
    can_send_polls=True,
    can_send_other_messages=True,
    can_add_web_page_previews=True,
)


class Manager:
    """管理模块"""

    # aiogram instance
    bot: Bot
    dp: Dispatcher

    # global config
    config: ConfigParser

    # routes
    handlers: List

    logger = logger

    def __init__(self):
        self.dp = Dispatcher()
        self.config = ConfigParser()
        self.handlers = []

    def setup(self):
        self.load_config()

        self.setup_logger()

        token = os.environ.get("TOKEN") or self.config["telegram"]["token"]
        if not token:
            logger.error("telegram token is missing")
            sys.exit(1)

        self.bot = Bot(token)
        logger.info("bot is setup")

        self.setup_handlers()

    def load_config(self):
        """加载 main.ini，默认会配置相关代码"""
        config = self.config

        # 设置默认模板
        for key, section in SETTINGS_TEMPLATE.items():
            config.setdefault(key, section)

        # 从文件读取
        if os.path.isfile("main.ini"):
            try:
                with open("main.ini", "r", encoding="utf-8") as f:
                    config.read_file(f)

                logger.info("settings is loaded from main.ini")
            except IOError:
                logger.warning("main.ini is not readable, using defaults")

    def setup_logger(self):
        """设置logger"""
        logger = self.logger

        if self.config["default"].getboolean("debug", False):
            logger.remove()
            logger.add(sys.stderr, level=10)
            logger.debug("logger is setup with debug level")
            return

        logger.remove()
        logger.add(sys.stderr, level=20)
        logger.info("logger is setup")

    def setup_handlers(self):
        """
        设置事件处理
        """
        for func, type_name, args, kwargs in self.handlers:
            observer = self.dp.observers.get(type_name, None)
            if not observer or not hasattr(observer, "register"):
                logger.warning(f"dispatcher:unknown type {type_name}")
                continue

            method = observer.register
            method(func, *args, **kwargs)
            logger.info(f"dispatcher {func.__name__}:{observer.event_name}.{method.__name__}({args}, {kwargs})")

    def register(self, type_name, *args, **kwargs):
        """
        延迟注册到 Dispatcher
        """

        def wrapper(func):
            self.handlers.append((func, type_name, args, kwargs))

            @wraps(func)
            async def _wrapper(*args, **kwargs):
                return await func(*args, **kwargs)

            return _wrapper

        return wrapper

    async def start(self):
        # token 无效时直接抛出，进程退出
        me = await self.bot.get_me()
        logger.info(f"bot {me.id}(@{me.username}) is connected")

        if "admin" in self.config["telegram"]:
            admin = self.config["telegram"]["admin"]
            await self._best_effort(f"chat {admin} startup notification", self.bot.send_message(admin, "bot is started"))

        await self.dp.start_polling(self.bot)

    async def _best_effort(self, action: str, call: Awaitable[T]) -> Optional[T]:
        """
        所有平台调用都经过这里，失败只记录日志，不重试也不向上抛出

        action: log prefix for the call
        call: pending bot method
        """
        try:
            return await call
        except TelegramBadRequest as e:
            logger.warning(f"{action} failed: {e.message}")
        except Exception:
            logger.exception(f"{action} failed")

        return None

    async def restrict(self, chat: int, member: int) -> bool:
        """禁言"""
        ok = await self._best_effort(
            f"chat {chat} member {member} restrict",
            self.bot.restrict_chat_member(chat, member, permissions=MUTED),
        )
        if ok:
            logger.info(f"chat {chat} member {member} is restricted")

        return bool(ok)

    async def unrestrict(self, chat: int, member: int) -> bool:
        """解除禁言"""
        ok = await self._best_effort(
            f"chat {chat} member {member} unrestrict",
            self.bot.restrict_chat_member(chat, member, permissions=UNMUTED),
        )
        if ok:
            logger.info(f"chat {chat} member {member} is unrestricted")

        return bool(ok)

    async def send_challenge(
        self, chat: int, content: str, reply_to: int, reply_markup: types.InlineKeyboardMarkup
    ) -> Optional[int]:
        """
        发送验证消息，返回消息ID，失败返回 None
        """
        resp = await self._best_effort(
            f"chat {chat} message {reply_to} reply",
            self.bot.send_message(
                chat,
                content,
                parse_mode="HTML",
                reply_parameters=types.ReplyParameters(message_id=reply_to, allow_sending_without_reply=True),
                link_preview_options=types.LinkPreviewOptions(is_disabled=True),
                reply_markup=reply_markup,
            ),
        )
        if resp is None:
            return None

        logger.info(f"chat {chat} message {reply_to} replied with {resp.message_id}")
        return resp.message_id

    async def delete_message(self, chat: int, msg: int) -> bool:
        ok = await self._best_effort(f"chat {chat} message {msg} delete", self.bot.delete_message(chat, msg))
        if ok:
            logger.info(f"chat {chat} message {msg} deleted")

        return bool(ok)

    async def kick(self, chat: int, member: int) -> bool:
        """踢出群组，需要随后 unban 才能再次加入"""
        ok = await self._best_effort(
            f"chat {chat} member {member} kick",
            self.bot.ban_chat_member(chat, member),
        )
        if ok:
            logger.info(f"chat {chat} member {member} is kicked")

        return bool(ok)

    async def unban(self, chat: int, member: int) -> bool:
        ok = await self._best_effort(
            f"chat {chat} member {member} unban",
            self.bot.unban_chat_member(chat, member, only_if_banned=True),
        )
        if ok:
            logger.info(f"chat {chat} member {member} is unbanned")

        return bool(ok)

    async def answer_callback(self, query: types.CallbackQuery) -> bool:
        ok = await self._best_effort(
            f"callback {query.id} answer",
            self.bot.answer_callback_query(query.id),
        )
        return bool(ok)


manager = Manager()
