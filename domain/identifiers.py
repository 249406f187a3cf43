"""Identifier generation for user-created entities."""

import re
import time
import uuid


def _random_suffix() -> str:
    return uuid.uuid4().hex[:6]


def _base36(number: int) -> str:
    digits = '0123456789abcdefghijklmnopqrstuvwxyz'
    if number == 0:
        return '0'
    result = ''
    while number:
        number, remainder = divmod(number, 36)
        result = digits[remainder] + result
    return result


def new_custom_project_id() -> str:
    """e.g. ``custom-lx3k2m1a-4f9c2e``"""
    return f"custom-{_base36(int(time.time() * 1000))}-{_random_suffix()}"


def new_member_id(project_id: str) -> str:
    return f"{project_id}-member-{_random_suffix()}"


def new_event_id(date: str, start_time: str) -> str:
    """e.g. ``evt-202403150930-a1b2c3``"""
    digits = re.sub(r'[^0-9]', '', f"{date}-{start_time}")
    return f"evt-{digits}-{_random_suffix()}"


def new_holiday_id(date: str) -> str:
    digits = re.sub(r'[^0-9]', '', date)
    return f"hol-{digits}-{_random_suffix()}"
