"""
成员验证模块配置和常量
Member captcha module configuration and constants
"""

from typing import List

# 支持的群组类型
SUPPORT_GROUP_TYPES: List[str] = ["supergroup", "group"]

# 验证超时 (秒)，超时未点击按钮即被送走
APPROVAL_TIMEOUT = 30

WELCOME_TEXT = (
    "Welcome, %(mention)s!\n\n"
    "Please press the button below within <b>%(timeout)d seconds</b> to confirm that you are a real person "
    "and that you have read the group rules. Until then you will not be able to send messages."
)

BUTTON_TEXT = "I'm human and I have read the rules"
