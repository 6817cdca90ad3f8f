"""
Tests for the marker codec.
"""
import base64
import pytest

from navigator_secretconf.exceptions import DecryptFailed, MalformedEncoding
from navigator_secretconf.marker import PREFIX, SUFFIX, is_wrapped, unwrap, wrap


class TestWrap:
    """Tests for wrap/unwrap."""

    def test_wrap_format(self):
        """Test wrapped text is prefix + base64 + suffix."""
        blob = b"\x00\x01binary\xff"
        text = wrap(blob)
        assert text.startswith("$(")
        assert text.endswith(")")
        assert text == PREFIX + base64.b64encode(blob).decode() + SUFFIX

    def test_unwrap(self):
        """Test unwrap returns the original blob."""
        blob = bytes(range(256))
        assert unwrap(wrap(blob)) == blob

    def test_wrap_empty(self):
        assert wrap(b"") == "$()"
        assert unwrap("$()") == b""


class TestIsWrapped:
    """Tests for is_wrapped."""

    @pytest.mark.parametrize("text", ["$()", "$(aGVsbG8=)", "$(not base64!)"])
    def test_wrapped(self, text):
        """Test only prefix and suffix are checked."""
        assert is_wrapped(text) is True

    @pytest.mark.parametrize(
        "text", ["", "s3cret", "$(", "(abc)", "$abc)", "$(abc", " $(abc)", "$(abc) "]
    )
    def test_not_wrapped(self, text):
        assert is_wrapped(text) is False


class TestUnwrapErrors:
    """Tests for malformed marker values."""

    def test_invalid_base64(self):
        """Test sentinels around invalid base64 are malformed."""
        with pytest.raises(MalformedEncoding):
            unwrap("$(hello)")

    def test_invalid_characters(self):
        with pytest.raises(MalformedEncoding):
            unwrap("$(aGVs*G8=)")

    def test_not_wrapped(self):
        with pytest.raises(MalformedEncoding):
            unwrap("aGVsbG8=")

    def test_malformed_is_decrypt_failure(self):
        """Test MalformedEncoding is reported as a decryption failure."""
        with pytest.raises(DecryptFailed):
            unwrap("$(###)")

    def test_plaintext_collision(self):
        """Test plaintext that looks wrapped is taken as already encrypted.

        Known limitation of the textual framing.
        """
        assert is_wrapped("$(abcd)") is True
        assert unwrap("$(abcd)") == base64.b64decode("abcd")
