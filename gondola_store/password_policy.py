"""Password rules checked before an account is created or a password changed."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, List, Tuple

MIN_LENGTH = 6
MAX_LENGTH = 32
SPECIAL_CHARACTERS = "!@#$%^&*"


@dataclass(frozen=True)
class PasswordRule:
    key: str
    message: str
    test: Callable[[str], bool]


@dataclass(frozen=True)
class RuleResult:
    key: str
    message: str
    passed: bool


def _matches(pattern: str) -> Callable[[str], bool]:
    compiled = re.compile(pattern)
    return lambda password: compiled.search(password) is not None


PASSWORD_RULES: Tuple[PasswordRule, ...] = (
    PasswordRule(
        "min_length",
        f"At least {MIN_LENGTH} characters",
        lambda password: len(password) >= MIN_LENGTH,
    ),
    PasswordRule(
        "max_length",
        f"At most {MAX_LENGTH} characters",
        lambda password: len(password) <= MAX_LENGTH,
    ),
    PasswordRule("uppercase", "At least one uppercase letter", _matches(r"[A-Z]")),
    PasswordRule("lowercase", "At least one lowercase letter", _matches(r"[a-z]")),
    PasswordRule("number", "At least one number", _matches(r"[0-9]")),
    PasswordRule(
        "special_char",
        f"At least one special character ({SPECIAL_CHARACTERS})",
        _matches("[" + re.escape(SPECIAL_CHARACTERS) + "]"),
    ),
)


def check_password(password: str) -> List[RuleResult]:
    return [RuleResult(rule.key, rule.message, rule.test(password)) for rule in PASSWORD_RULES]


def is_password_valid(password: str) -> bool:
    return all(result.passed for result in check_password(password))
