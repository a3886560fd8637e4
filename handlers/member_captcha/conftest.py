"""Shared fixtures: a recording gateway standing in for the Telegram bot."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import pytest

from .coordinator import ApprovalCoordinator
from .registry import PendingApprovals


class FakeGateway:
    """Records every platform call; each call yields to the loop once like real I/O."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.send_fails = False
        self._ids = itertools.count(1000)

    async def _io(self, *call: Any) -> None:
        self.calls.append(call)
        await asyncio.sleep(0)

    async def restrict(self, chat: int, member: int) -> bool:
        await self._io("restrict", chat, member)
        return True

    async def unrestrict(self, chat: int, member: int) -> bool:
        await self._io("unrestrict", chat, member)
        return True

    async def send_challenge(self, chat: int, content: str, reply_to: int, reply_markup: Any) -> int | None:
        await self._io("send_challenge", chat, reply_to)
        if self.send_fails:
            return None
        return next(self._ids)

    async def delete_message(self, chat: int, msg: int) -> bool:
        await self._io("delete_message", chat, msg)
        return True

    async def kick(self, chat: int, member: int) -> bool:
        await self._io("kick", chat, member)
        return True

    async def unban(self, chat: int, member: int) -> bool:
        await self._io("unban", chat, member)
        return True

    def named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def pending() -> PendingApprovals:
    return PendingApprovals()


@pytest.fixture
def coordinator(gateway: FakeGateway, pending: PendingApprovals) -> ApprovalCoordinator:
    return ApprovalCoordinator(gateway, pending, timeout=0.05)
