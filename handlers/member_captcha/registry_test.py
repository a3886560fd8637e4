"""Unit tests for handlers.member_captcha.registry: the pending approvals map."""

from __future__ import annotations

import asyncio

import pytest

from .registry import PendingApprovals

pytestmark = pytest.mark.asyncio


class TestInsert:
    async def test_fresh_key_returns_none(self, pending: PendingApprovals) -> None:
        assert await pending.insert(-100, 1, 10) is None
        assert (-100, 1) in pending
        assert len(pending) == 1

    async def test_existing_key_is_replaced(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        assert await pending.insert(-100, 1, 11) == 10
        assert len(pending) == 1
        assert await pending.take_if_present(-100, 1) == 11

    async def test_same_member_in_different_chats(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        await pending.insert(-200, 1, 20)
        assert len(pending) == 2
        assert await pending.take_if_present(-200, 1) == 20
        assert (-100, 1) in pending


class TestTakeIfPresent:
    async def test_missing_key_returns_none(self, pending: PendingApprovals) -> None:
        assert await pending.take_if_present(-100, 1) is None

    async def test_take_removes_entry(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        assert await pending.take_if_present(-100, 1) == 10
        assert (-100, 1) not in pending
        assert await pending.take_if_present(-100, 1) is None

    async def test_concurrent_takes_have_one_winner(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        results = await asyncio.gather(*(pending.take_if_present(-100, 1) for _ in range(100)))
        assert results.count(10) == 1
        assert results.count(None) == 99
        assert len(pending) == 0

    async def test_matching_message_id_is_taken(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        assert await pending.take_if_present(-100, 1, 10) == 10
        assert (-100, 1) not in pending

    async def test_replaced_message_id_is_left_alone(self, pending: PendingApprovals) -> None:
        await pending.insert(-100, 1, 10)
        await pending.insert(-100, 1, 11)

        assert await pending.take_if_present(-100, 1, 10) is None
        assert await pending.take_if_present(-100, 1) == 11
