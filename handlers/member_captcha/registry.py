"""
待验证成员登记表
Pending approvals registry

(chat_id, member_id) -> challenge message id
"""

import asyncio
from typing import Dict, Optional, Tuple


class PendingApprovals:
    """
    所有加入流程和按钮回调共享的待验证表，整张表由一把锁保护

    take_if_present 是唯一的删除入口：按钮回调和超时任务同时调用时，
    只有一方能拿到消息ID，另一方得到 None
    """

    def __init__(self):
        self._items: Dict[Tuple[int, int], int] = {}
        self._lock = asyncio.Lock()

    async def insert(self, chat_id: int, member_id: int, message_id: int) -> Optional[int]:
        """
        登记验证消息，返回被替换掉的旧消息ID（成员在验证期内退出后重新加入）
        """
        async with self._lock:
            previous = self._items.get((chat_id, member_id))
            self._items[(chat_id, member_id)] = message_id
            return previous

    async def take_if_present(
        self, chat_id: int, member_id: int, message_id: Optional[int] = None
    ) -> Optional[int]:
        """
        取出并删除登记，不存在返回 None

        message_id: 只有登记的仍是这条验证消息时才取出，旧的超时任务不会取走重新加入后的登记
        """
        async with self._lock:
            key = (chat_id, member_id)
            if message_id is not None and self._items.get(key) != message_id:
                return None

            return self._items.pop(key, None)

    def __contains__(self, key: Tuple[int, int]) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
