"""Expected call counts for request verification."""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Times:
    """Inclusive range of acceptable call counts."""

    minimum: int
    maximum: float
    description: str

    def __post_init__(self) -> None:
        if self.minimum < 0 or self.maximum < self.minimum:
            raise ValueError(f"invalid call count range {self.minimum}..{self.maximum}")

    @classmethod
    def exactly(cls, count: int) -> "Times":
        return cls(count, count, f"exactly {count} time{'' if count == 1 else 's'}")

    @classmethod
    def at_least(cls, count: int) -> "Times":
        return cls(count, math.inf, f"at least {count} time{'' if count == 1 else 's'}")

    @classmethod
    def at_most(cls, count: int) -> "Times":
        return cls(0, count, f"at most {count} time{'' if count == 1 else 's'}")

    @classmethod
    def between(cls, minimum: int, maximum: int) -> "Times":
        return cls(minimum, maximum, f"between {minimum} and {maximum} times")

    @classmethod
    def never(cls) -> "Times":
        return cls(0, 0, "never")

    @classmethod
    def once(cls) -> "Times":
        return cls.exactly(1)

    @classmethod
    def at_least_once(cls) -> "Times":
        return cls.at_least(1)

    @classmethod
    def at_most_once(cls) -> "Times":
        return cls.at_most(1)

    def matches(self, count: int) -> bool:
        return self.minimum <= count <= self.maximum

    def __str__(self) -> str:
        return self.description
