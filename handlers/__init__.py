from .member_captcha import new_member_callback, new_members
