"""63-bit, time-ordered unique identifiers (snowflake layout).

Bit layout, most significant first: 41 bits of milliseconds since ``EPOCH``,
10 bits of node id, 12 bits of per-millisecond sequence.
"""

import threading
import time
from typing import Callable

from online_judge.config import Config

EPOCH = 1288834974657  # ms, Nov 04 2010 01:42:54 UTC
NODE_BITS = 10
SEQUENCE_BITS = 12

MAX_NODE = (1 << NODE_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
TIME_SHIFT = NODE_BITS + SEQUENCE_BITS
NODE_SHIFT = SEQUENCE_BITS


class IdGenerationError(Exception):
    """Raised when an identifier cannot be issued safely."""


class SnowflakeGenerator:
    def __init__(self, node_id: int, clock: Callable[[], float] = time.time):
        if not 0 <= node_id <= MAX_NODE:
            raise IdGenerationError(f"Node id must be between 0 and {MAX_NODE}")
        self.node_id = node_id
        self._clock = clock
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def next_id(self) -> int:
        with self._lock:
            now = self._now_ms()
            if now < self._last_ms:
                raise IdGenerationError(
                    f"Clock moved backwards by {self._last_ms - now} ms"
                )
            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & MAX_SEQUENCE
                if self._sequence == 0:
                    # Sequence exhausted for this millisecond
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._sequence = 0
            self._last_ms = now
            return ((now - EPOCH) << TIME_SHIFT) | (self.node_id << NODE_SHIFT) | self._sequence


id_generator = SnowflakeGenerator(Config.SNOWFLAKE_NODE_ID)


def get_id_generator() -> SnowflakeGenerator:
    return id_generator
