"""
成员验证流程
Member approval flow

Joined -> Challenged -> Admitted | Expelled

一个成员只会有一种结局：按钮回调和超时任务都通过 PendingApprovals.take_if_present
争夺同一条登记，先拿到的一方执行，另一方什么都不做。
"""

import asyncio
from typing import Optional, Set

from aiogram import types
from loguru import logger

from .config import APPROVAL_TIMEOUT
from .helpers import build_captcha_message
from .registry import PendingApprovals


class ApprovalCoordinator:
    """
    gateway: restrict / unrestrict / send_challenge / delete_message / kick / unban,
    所有调用都是 best-effort，结果只作日志参考
    """

    def __init__(self, gateway, pending: Optional[PendingApprovals] = None, timeout: float = APPROVAL_TIMEOUT):
        self.gateway = gateway
        self.pending = pending if pending is not None else PendingApprovals()
        self.timeout = timeout

        # 持有超时任务的引用，任务结束后自动移除
        self._timers: Set[asyncio.Task] = set()

    @property
    def timers(self) -> Set[asyncio.Task]:
        return self._timers

    async def on_join(self, chat_id: int, member: types.User, reply_to: int) -> bool:
        """
        禁言新成员并发出验证消息，返回是否进入等待验证状态
        """
        prefix = f"chat {chat_id} member {member.id}"

        # 禁言失败也继续发验证消息
        await self.gateway.restrict(chat_id, member.id)

        content, reply_markup = build_captcha_message(member, int(self.timeout))
        message_id = await self.gateway.send_challenge(chat_id, content, reply_to, reply_markup)
        if message_id is None:
            logger.warning(f"{prefix} challenge is not sent, member stays restricted")
            return False

        previous = await self.pending.insert(chat_id, member.id, message_id)
        if previous is not None:
            logger.info(f"{prefix} rejoined, previous challenge {previous} is replaced")
            await self.gateway.delete_message(chat_id, previous)

        task = asyncio.create_task(self._wait_and_expire(chat_id, member.id, message_id))
        self._timers.add(task)
        task.add_done_callback(self._timer_done)

        logger.info(f"{prefix} challenge {message_id} is sent, expires in {self.timeout}s")
        return True

    async def on_acknowledge(self, chat_id: int, member_id: int) -> bool:
        """
        成员点击按钮，返回是否由本次点击完成验证
        """
        prefix = f"chat {chat_id} member {member_id}"

        await self.gateway.unrestrict(chat_id, member_id)

        message_id = await self.pending.take_if_present(chat_id, member_id)
        if message_id is None:
            logger.debug(f"{prefix} no pending challenge")
            return False

        await self.gateway.delete_message(chat_id, message_id)
        logger.info(f"{prefix} is accepted")
        return True

    async def expire(self, chat_id: int, member_id: int, message_id: Optional[int] = None) -> bool:
        """
        超时处理，返回是否送走了成员

        message_id: 本次加入发出的验证消息，登记已被重新加入替换时不处理
        """
        prefix = f"chat {chat_id} member {member_id}"

        message_id = await self.pending.take_if_present(chat_id, member_id, message_id)
        if message_id is None:
            logger.debug(f"{prefix} is already resolved")
            return False

        # 踢出后立即解封，允许以后再次加入
        await self.gateway.kick(chat_id, member_id)
        await self.gateway.unban(chat_id, member_id)
        await self.gateway.delete_message(chat_id, message_id)

        logger.info(f"{prefix} is kicked by timeout")
        return True

    async def _wait_and_expire(self, chat_id: int, member_id: int, message_id: int):
        await asyncio.sleep(self.timeout)
        await self.expire(chat_id, member_id, message_id)

    def _timer_done(self, task: asyncio.Task):
        self._timers.discard(task)

        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error("challenge timer failed")

    async def close(self):
        """进程退出时取消所有未到期的超时任务"""
        timers = list(self._timers)
        for task in timers:
            task.cancel()

        await asyncio.gather(*timers, return_exceptions=True)

        if timers:
            logger.info(f"{len(timers)} pending challenge timers are cancelled")
