"""
成员验证主模块
Member captcha main module
"""

from aiogram import F, types
from loguru import logger

from manager import manager
from .config import SUPPORT_GROUP_TYPES
from .coordinator import ApprovalCoordinator

approvals = ApprovalCoordinator(manager)


@manager.register("message", F.new_chat_members)
async def new_members(msg: types.Message):
    """
    新成员加入，逐个禁言并发出验证消息
    """
    chat = msg.chat

    if chat.type not in SUPPORT_GROUP_TYPES:
        return

    for member in msg.new_chat_members or []:
        if member.is_bot:
            logger.debug(f"chat {chat.id}({chat.title}) msg {msg.message_id} bot {member.id} is ignored")
            continue

        logger.info(f"chat {chat.id}({chat.title}) msg {msg.message_id} new member {member.id}({member.full_name})")
        await approvals.on_join(chat.id, member, msg.message_id)


@manager.register("callback_query")
async def new_member_callback(query: types.CallbackQuery):
    """
    处理用户点击验证按钮后的逻辑
    """
    msg = query.message
    if msg is None:
        await manager.answer_callback(query)
        return

    try:
        await approvals.on_acknowledge(msg.chat.id, query.from_user.id)
    finally:
        await manager.answer_callback(query)
