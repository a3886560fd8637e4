#!/usr/bin/python3

from handlers.member_captcha import approvals
from manager import manager


async def main():
    manager.setup()

    try:
        await manager.start()
    finally:
        await approvals.close()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
