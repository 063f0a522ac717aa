"""Packed bitmap of initialized ticks.

One bit per tick-spacing-aligned tick, grouped in 256-bit words keyed by
word position. Ticks are compressed by floor division with the spacing, so
word and bit positions follow from the compressed tick with an arithmetic
shift and mask.
"""

from __future__ import annotations

import structlog

from perpamm.errors import TickMisaligned

logger = structlog.get_logger()


def compress(tick: int, tick_spacing: int) -> int:
    """Tick divided by spacing, rounded toward negative infinity."""
    return tick // tick_spacing


def position(compressed_tick: int) -> tuple[int, int]:
    """(word position, bit position) of a compressed tick."""
    return compressed_tick >> 8, compressed_tick & 0xFF


def _most_significant_bit(x: int) -> int:
    return x.bit_length() - 1


def _least_significant_bit(x: int) -> int:
    return (x & -x).bit_length() - 1


class TickBitmap:
    """Sparse bitmap over compressed ticks."""

    def __init__(self) -> None:
        self._words: dict[int, int] = {}

    def __repr__(self) -> str:
        return f"TickBitmap(words={len(self._words)})"

    def word(self, word_pos: int) -> int:
        """Raw 256-bit word at a word position (0 if never touched)."""
        return self._words.get(word_pos, 0)

    def is_initialized(self, tick: int, tick_spacing: int) -> bool:
        word_pos, bit_pos = position(compress(tick, tick_spacing))
        return bool(self.word(word_pos) >> bit_pos & 1)

    def flip_tick(self, tick: int, tick_spacing: int) -> None:
        """Flip the initialized state of a tick.

        Raises:
            TickMisaligned: If tick is not a multiple of tick_spacing
        """
        if tick % tick_spacing != 0:
            raise TickMisaligned(f"Tick {tick} not aligned to spacing {tick_spacing}")
        word_pos, bit_pos = position(tick // tick_spacing)
        flipped = self.word(word_pos) ^ (1 << bit_pos)
        if flipped:
            self._words[word_pos] = flipped
        else:
            self._words.pop(word_pos, None)
        logger.debug("tick_flipped", tick=tick, initialized=bool(flipped >> bit_pos & 1))

    def next_initialized_tick_within_one_word(
        self,
        tick: int,
        tick_spacing: int,
        lte: bool,
    ) -> tuple[int, bool]:
        """Next initialized tick in the same word as `tick`, or the word edge.

        Args:
            tick: Starting tick
            tick_spacing: Spacing between usable ticks
            lte: Search left (at or below tick) when True, right (strictly
                above tick) otherwise

        Returns:
            (next_tick, initialized). When no bit is set in the searched part
            of the word, next_tick is the last tick of the word in the search
            direction and initialized is False.
        """
        compressed = compress(tick, tick_spacing)

        if lte:
            word_pos, bit_pos = position(compressed)
            # all bits at or to the right of bit_pos
            mask = (1 << bit_pos) - 1 + (1 << bit_pos)
            masked = self.word(word_pos) & mask
            if masked:
                return (compressed - (bit_pos - _most_significant_bit(masked))) * tick_spacing, True
            return (compressed - bit_pos) * tick_spacing, False

        # start from the next compressed tick, the current one is not a candidate
        compressed += 1
        word_pos, bit_pos = position(compressed)
        # all bits at or to the left of bit_pos
        mask = ~((1 << bit_pos) - 1)
        masked = self.word(word_pos) & mask
        if masked:
            return (compressed + (_least_significant_bit(masked) - bit_pos)) * tick_spacing, True
        return (compressed + (255 - bit_pos)) * tick_spacing, False


__all__ = ["TickBitmap", "compress", "position"]
