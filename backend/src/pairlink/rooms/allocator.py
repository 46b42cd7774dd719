"""Room code generation."""

from __future__ import annotations

import random
import secrets
from typing import Container, Sized

from .constants import ROOM_ID_MAX, ROOM_ID_MIN
from .errors import RoomCapacityError


class RoomIdAllocator:
    """Draw six digit room codes uniformly, re-rolling on collision."""

    def __init__(
        self,
        *,
        minimum: int = ROOM_ID_MIN,
        maximum: int = ROOM_ID_MAX,
        rng: random.Random | None = None,
    ) -> None:
        if minimum < 0 or maximum < minimum:
            raise ValueError("invalid room id range")
        self._minimum = minimum
        self._maximum = maximum
        self._rng = rng or secrets.SystemRandom()

    @property
    def capacity(self) -> int:
        return self._maximum - self._minimum + 1

    def allocate(self, taken: Container[str]) -> str:
        """Return a code absent from *taken*.

        Callers must hold whatever lock protects *taken* so that the returned
        code is still free when it gets inserted.
        """

        if isinstance(taken, Sized) and len(taken) >= self.capacity:
            raise RoomCapacityError()
        while True:
            candidate = str(self._rng.randint(self._minimum, self._maximum))
            if candidate not in taken:
                return candidate


__all__ = ["RoomIdAllocator"]
