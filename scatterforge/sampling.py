"""
Random sampling for scatter directions.

Implements:
- Per-thread random generators, seeded once and never reseeded
- Independent per-worker generators spawned from a single seed
- Rejection sampling of points inside the unit ball
"""

from __future__ import annotations
import logging
import threading
from typing import List, Optional

import numpy as np

from .vec3 import Vec3

logger = logging.getLogger(__name__)

# Acceptance is about pi/6 per draw, so 32 consecutive rejections
# happens with probability below 1e-10.
REJECTION_WARNING_THRESHOLD = 32

_local = threading.local()
_thread_seed_sequence: Optional[np.random.SeedSequence] = None
_thread_seed_lock = threading.Lock()


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create a generator seeded once from ``seed`` (or OS entropy)."""
    return np.random.default_rng(seed)


def spawn_rngs(seed: Optional[int], count: int) -> List[np.random.Generator]:
    """Create ``count`` statistically independent generators.

    Meant for handing one generator to each worker of a pool. All of them
    derive from a single SeedSequence, so a fixed seed reproduces the whole
    set.
    """
    if count < 1:
        raise ValueError(f"count must be at least 1, got {count}")
    children = np.random.SeedSequence(seed).spawn(count)
    return [np.random.default_rng(child) for child in children]


def seed_thread_rng(seed: Optional[int]) -> None:
    """Make thread generators reproducible from ``seed``.

    Resets the calling thread's generator. Threads that create their
    generator afterwards get independent children of the same SeedSequence.
    """
    global _thread_seed_sequence
    with _thread_seed_lock:
        _thread_seed_sequence = None if seed is None else np.random.SeedSequence(seed)
    if hasattr(_local, 'rng'):
        del _local.rng


def thread_rng() -> np.random.Generator:
    """Return the calling thread's generator, creating it on first use."""
    rng = getattr(_local, 'rng', None)
    if rng is None:
        with _thread_seed_lock:
            if _thread_seed_sequence is None:
                seed = None
            else:
                seed = _thread_seed_sequence.spawn(1)[0]
        rng = np.random.default_rng(seed)
        _local.rng = rng
    return rng


def random_in_unit_sphere(rng: Optional[np.random.Generator] = None) -> Vec3:
    """Generate a random point uniformly distributed inside the unit ball.

    Candidates are drawn uniformly from the cube [-1, 1)^3 and rejected until
    one has squared length below 1. They are not normalized, so the accepted
    points fill the ball rather than sitting on its surface.

    Args:
        rng: Generator to draw from (default: the calling thread's)

    Returns:
        A point with squared length strictly below 1
    """
    if rng is None:
        rng = thread_rng()

    attempts = 0
    while True:
        attempts += 1
        p = rng.uniform(-1.0, 1.0, 3)
        if np.dot(p, p) < 1.0:
            if attempts > REJECTION_WARNING_THRESHOLD:
                logger.warning(
                    "random_in_unit_sphere needed %d draws (threshold %d)",
                    attempts, REJECTION_WARNING_THRESHOLD,
                )
            return Vec3.from_array(p)
