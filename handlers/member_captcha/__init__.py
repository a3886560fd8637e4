"""
成员验证模块
Member captcha module

新成员加入后立即禁言，并发出带按钮的验证消息：
- 规定时间内点击按钮，解除禁言，删除验证消息
- 超时未点击，踢出并立即解封（允许以后再次加入），删除验证消息
"""

from .member_captcha import approvals, new_member_callback, new_members

__all__ = [
    "approvals",
    "new_member_callback",
    "new_members",
]
