"""Data models for helm-outdated-dependencies."""

from __future__ import annotations

import enum


class IncrementType(str, enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class UpdateType(enum.Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    UP_TO_DATE = "up-to-date"
    UNKNOWN = "unknown"

    @classmethod
    def from_str(cls, s: str) -> UpdateType:
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN
