from __future__ import annotations
import time
from typing import Callable, Optional

from .normalize import code_fragment


DEFAULT_PREFIX = "KICKSTARTER"
MAX_CODE_LENGTH = 50


class CodeFactory:
    """Builds ``<PREFIX>_<NAME>_<millis>`` discount codes.

    The millisecond suffix never repeats within one factory: a clock reading
    that is not later than the previous one is bumped to previous + 1. When
    the code would exceed ``max_length`` the name part is shortened, so the
    suffix always survives. A prefix too long to leave room for the suffix
    is cut down as well.
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        max_length: int = MAX_CODE_LENGTH,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.prefix = code_fragment(prefix) or DEFAULT_PREFIX
        self.max_length = max_length
        self._clock = clock or time.time
        self._last_stamp = 0

    def _next_stamp(self) -> int:
        stamp = int(self._clock() * 1000)
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return stamp

    def next_code(self, name: str) -> str:
        tail = f"_{self._next_stamp()}"
        head = f"{self.prefix}_"[: max(self.max_length - len(tail), 0)]
        room = max(self.max_length - len(head) - len(tail), 0)
        body = code_fragment(name)[:room]
        return f"{head}{body}{tail}"[: self.max_length]
