"""
Random sources for dice rolls.

The evaluator never touches a global generator. It is handed an object with a
``randint(low, high)`` method, so tests can script exact faces and separate
callers can share or isolate their dice as they see fit.
"""

import random
import threading
from typing import Iterable, List, Optional, Protocol


class RandomSource(Protocol):
    """Anything that can produce a uniform integer in a closed range."""

    def randint(self, low: int, high: int) -> int:
        ...


class SeededRandomSource:
    """
    Thread-safe wrapper around ``random.Random``.

    Example:
        source = SeededRandomSource(seed=42)
        face = source.randint(1, 20)
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Random seed for deterministic rolls (testing/replay).
                  None seeds from system entropy.
        """
        self.seed = seed
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def randint(self, low: int, high: int) -> int:
        with self._lock:
            return self._rng.randint(low, high)

    def __repr__(self) -> str:
        return f"SeededRandomSource(seed={self.seed})"


class ScriptedRandomSource:
    """
    Random source that replays a fixed list of faces.

    Used for exact-value tests. Each value must fall inside the requested
    range, otherwise ValueError is raised so a wrong script fails loudly.
    """

    def __init__(self, faces: Iterable[int]):
        self._faces: List[int] = list(faces)
        self._index = 0

    def randint(self, low: int, high: int) -> int:
        if self._index >= len(self._faces):
            raise ValueError("Scripted random source ran out of faces")
        face = self._faces[self._index]
        if not low <= face <= high:
            raise ValueError(f"Scripted face {face} outside range [{low}, {high}]")
        self._index += 1
        return face

    @property
    def remaining(self) -> int:
        return len(self._faces) - self._index


__all__ = ['RandomSource', 'SeededRandomSource', 'ScriptedRandomSource']
