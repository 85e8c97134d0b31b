from typing import Iterator

LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
UINT32_MASK = 0xFFFFFFFF


def lcg(seed: int) -> Iterator[float]:
    """Yield an endless stream of floats in [0, 1] from a 32-bit seed.

    Same constants and output scaling the game clients use to lay out pipes,
    so a room's seed produces identical obstacles everywhere. Call again with
    the same seed to restart the sequence.
    """
    state = seed & UINT32_MASK
    while True:
        state = (LCG_MULTIPLIER * state + LCG_INCREMENT) & UINT32_MASK
        yield state / UINT32_MASK
