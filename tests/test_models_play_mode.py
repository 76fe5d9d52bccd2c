"""Tests for play mode encoding and decoding."""

import pytest

from sonosync.errors import InvalidOperationError
from sonosync.models.play_mode import (
    PlayMode,
    RepeatMode,
    decode_play_mode,
    encode_play_mode,
)


class TestDecodePlayMode:
    """Tests for decode_play_mode."""

    @pytest.mark.parametrize("mode", list(PlayMode))
    def test_decode_then_encode_is_identity(self, mode: PlayMode) -> None:
        """Test every native mode survives a decode/encode cycle."""
        shuffle, repeat = decode_play_mode(mode.value)
        assert encode_play_mode(shuffle, repeat.value) is mode

    def test_decode_shuffle_repeat_all(self) -> None:
        """Test SHUFFLE means shuffle with repeat all."""
        assert decode_play_mode("SHUFFLE") == (True, RepeatMode.ALL)

    def test_decode_repeat_one(self) -> None:
        """Test REPEAT_ONE means no shuffle with repeat one."""
        assert decode_play_mode("REPEAT_ONE") == (False, RepeatMode.ONE)

    def test_decode_unknown_mode(self) -> None:
        """Test unknown modes decode as normal playback."""
        assert decode_play_mode("PARTY") == (False, RepeatMode.NONE)

    def test_decode_missing_mode(self) -> None:
        """Test a missing mode decodes as normal playback."""
        assert decode_play_mode(None) == (False, RepeatMode.NONE)


class TestEncodePlayMode:
    """Tests for encode_play_mode."""

    def test_encode_no_shuffle_repeat_one(self) -> None:
        """Test shuffle off with repeat one maps to REPEAT_ONE."""
        assert encode_play_mode(False, "One") is PlayMode.REPEAT_ONE

    def test_encode_shuffle_no_repeat(self) -> None:
        """Test shuffle on without repeat maps to SHUFFLE_NOREPEAT."""
        assert encode_play_mode(True, "None") is PlayMode.SHUFFLE_NOREPEAT

    def test_encode_accepts_enum_member(self) -> None:
        """Test RepeatMode members are accepted directly."""
        assert encode_play_mode(False, RepeatMode.ALL) is PlayMode.REPEAT_ALL

    def test_encode_unknown_repeat_rejected(self) -> None:
        """Test an unknown repeat value has no mode."""
        with pytest.raises(InvalidOperationError, match="repeat"):
            encode_play_mode(True, "Twice")

    def test_encode_non_bool_shuffle_rejected(self) -> None:
        """Test a non-bool shuffle value has no mode."""
        with pytest.raises(InvalidOperationError, match="Shuffle"):
            encode_play_mode(None, "None")
