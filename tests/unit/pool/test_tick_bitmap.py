"""Tests for the initialized-tick bitmap."""

import pytest

from perpamm.errors import TickMisaligned
from perpamm.pool import TickBitmap
from perpamm.pool.tick_bitmap import compress, position

INITIALIZED_TICKS = [-200, -55, -4, 70, 78, 84, 139, 240, 535]


@pytest.fixture
def bitmap() -> TickBitmap:
    """Bitmap at spacing 1 with a spread of initialized ticks."""
    bitmap = TickBitmap()
    for tick in INITIALIZED_TICKS:
        bitmap.flip_tick(tick, 1)
    return bitmap


class TestCompression:
    def test_positive_tick(self):
        assert compress(125, 60) == 2

    def test_negative_tick_rounds_down(self):
        """Compression floors toward negative infinity."""
        assert compress(-1, 60) == -1
        assert compress(-60, 60) == -1
        assert compress(-61, 60) == -2

    def test_position_of_negative_tick(self):
        """Compressed -1 is the last bit of word -1."""
        assert position(-1) == (-1, 255)
        assert position(256) == (1, 0)


class TestFlipTick:
    def test_flip_initializes(self):
        bitmap = TickBitmap()
        bitmap.flip_tick(-230, 1)
        assert bitmap.is_initialized(-230, 1)
        assert not bitmap.is_initialized(-231, 1)
        assert not bitmap.is_initialized(-229, 1)

    def test_flip_twice_clears(self):
        """Flipping back leaves no word behind."""
        bitmap = TickBitmap()
        bitmap.flip_tick(-230, 1)
        bitmap.flip_tick(-230, 1)
        assert not bitmap.is_initialized(-230, 1)
        assert bitmap.word(-1) == 0

    def test_flip_with_spacing(self):
        bitmap = TickBitmap()
        bitmap.flip_tick(120, 60)
        assert bitmap.is_initialized(120, 60)
        assert bitmap.word(0) == 1 << 2

    def test_misaligned_raises(self):
        bitmap = TickBitmap()
        with pytest.raises(TickMisaligned):
            bitmap.flip_tick(61, 60)


class TestNextInitializedTickRight:
    """Searches with lte=False (strictly above the tick)."""

    def test_skips_current_initialized_tick(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(78, 1, False) == (84, True)

    def test_finds_next_tick(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(77, 1, False) == (78, True)

    def test_finds_negative_tick(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(-56, 1, False) == (-55, True)

    def test_word_boundary(self, bitmap):
        """Nothing set in the next word: returns its last tick."""
        assert bitmap.next_initialized_tick_within_one_word(255, 1, False) == (511, False)

    def test_crosses_into_next_word_start(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(-257, 1, False) == (-200, True)

    def test_with_spacing(self):
        bitmap = TickBitmap()
        bitmap.flip_tick(120, 60)
        assert bitmap.next_initialized_tick_within_one_word(0, 60, False) == (120, True)


class TestNextInitializedTickLeft:
    """Searches with lte=True (at or below the tick)."""

    def test_includes_current_tick(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(78, 1, True) == (78, True)

    def test_finds_previous_tick(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(79, 1, True) == (78, True)

    def test_word_boundary(self, bitmap):
        """Nothing at or below within the word: returns the word's first tick."""
        assert bitmap.next_initialized_tick_within_one_word(258, 1, True) == (256, False)
        assert bitmap.next_initialized_tick_within_one_word(256, 1, True) == (256, False)

    def test_negative_ticks(self, bitmap):
        assert bitmap.next_initialized_tick_within_one_word(-55, 1, True) == (-55, True)
        assert bitmap.next_initialized_tick_within_one_word(-56, 1, True) == (-200, True)

    def test_with_spacing_negative(self):
        """Tick -1 at spacing 60 compresses to -1 and finds -120 below."""
        bitmap = TickBitmap()
        bitmap.flip_tick(-120, 60)
        assert bitmap.next_initialized_tick_within_one_word(-1, 60, True) == (-120, True)
