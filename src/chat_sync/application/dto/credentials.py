from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SignUpData:
    display_name: str
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class LogInData:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class ProfilePatch:
    avatar_ref: str
