"""
Unit tests for bit embedding and extraction in DCT coefficients.
"""

import numpy as np
import pytest

from stegano_dct.config import MAGIC, EmbeddingPolicy
from stegano_dct.embedder import (
    bits_to_bytes,
    bytes_to_bits,
    embed_bits,
    embed_payload,
    extract_bits,
    extract_payload,
)
from stegano_dct.errors import HeaderCorrupt, InvalidInput, PayloadTooLarge


class TestBitPacking:

    def test_msb_first(self):
        assert bytes_to_bits(b"\x80\x01") == [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1]
        assert bits_to_bytes([0, 1, 0, 0, 0, 0, 0, 1]) == bytearray(b"A")

    def test_partial_byte_rejected(self):
        with pytest.raises(ValueError):
            bits_to_bytes([1, 0, 1])


class TestCoefficientBits:

    def test_bits_survive_sample_rounding(self, carrier, rng):
        bits = [int(b) for b in rng.integers(0, 2, size=1500)]
        stego = embed_bits(carrier, bits)
        assert stego.dtype == np.uint8
        assert extract_bits(stego, len(bits)) == bits

    def test_extreme_samples(self):
        """Saturated blocks are pulled into the margin instead of clipping."""
        img = np.zeros((16, 16, 3), dtype=np.uint8)
        img[:8] = 255
        bits = [1, 0, 1, 1, 0, 0, 1, 0] * 6
        assert extract_bits(embed_bits(img, bits), len(bits)) == bits

    def test_skip_offset(self, carrier):
        bits = [1, 1, 0, 1, 0, 0, 0, 1, 1, 0, 1]
        stego = embed_bits(carrier, bits)
        assert extract_bits(stego, 5, skip=6) == bits[6:]

    def test_unused_blocks_untouched(self, carrier):
        stego = embed_bits(carrier, [1] * 8)
        # 8 bits fill the first two blocks of channel 0
        np.testing.assert_array_equal(stego[:, 16:, 0], carrier[:, 16:, 0])
        np.testing.assert_array_equal(stego[8:, :, 0], carrier[8:, :, 0])
        np.testing.assert_array_equal(stego[:, :, 1:], carrier[:, :, 1:])

    def test_block_order_moves_to_next_channel(self, carrier):
        # 12x12 blocks * 4 bits fill channel 0; one more bit reaches channel 1
        bits = [0] * (144 * 4) + [1]
        stego = embed_bits(carrier, bits)
        assert extract_bits(stego, len(bits)) == bits
        np.testing.assert_array_equal(stego[:, 8:, 1], carrier[:, 8:, 1])
        np.testing.assert_array_equal(stego[8:, :, 1], carrier[8:, :, 1])
        np.testing.assert_array_equal(stego[:, :, 2], carrier[:, :, 2])

    def test_out_of_blocks(self):
        img = np.zeros((8, 8, 3), dtype=np.uint8)
        with pytest.raises(PayloadTooLarge):
            embed_bits(img, [1] * 13)

    def test_read_past_end(self):
        img = np.zeros((8, 8, 3), dtype=np.uint8)
        with pytest.raises(HeaderCorrupt):
            extract_bits(img, 13)


class TestPayload:

    def test_round_trip(self, carrier):
        stego = embed_payload(carrier, b"secret message", b"key")
        assert extract_payload(stego, b"key") == b"secret message"

    def test_carrier_not_mutated(self, carrier):
        before = carrier.copy()
        stego = embed_payload(carrier, b"secret", b"key")
        np.testing.assert_array_equal(carrier, before)
        assert stego.shape == carrier.shape
        assert stego is not carrier

    def test_frame_layout(self, carrier):
        stego = embed_payload(carrier, b"x" * 10, b"")
        frame = bits_to_bytes(extract_bits(stego, 96))
        assert frame[:4] == MAGIC
        assert frame[8:12] == bytearray(b"\x00\x00\x00\x0a")

    def test_fail_fast_on_capacity(self, carrier, monkeypatch):
        import stegano_dct.embedder as embedder

        def boom(*args, **kwargs):
            raise AssertionError("transform should not run")

        monkeypatch.setattr(embedder, "forward", boom)
        with pytest.raises(PayloadTooLarge):
            embed_payload(carrier, b"x" * 200, b"test123")

    def test_empty_payload(self, carrier):
        with pytest.raises(InvalidInput):
            embed_payload(carrier, b"", b"key")

    @pytest.mark.parametrize("payload", ["text", None, 42, [1, 2, 3]])
    def test_non_bytes_payload(self, carrier, payload):
        with pytest.raises(InvalidInput):
            embed_payload(carrier, payload, b"key")

    def test_bytearray_and_memoryview_payloads(self, carrier):
        for payload in (bytearray(b"mutable"), memoryview(b"view")):
            stego = embed_payload(carrier, payload, b"key")
            assert extract_payload(stego, b"key") == bytes(payload)

    @pytest.mark.parametrize("bad", [
        None,
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((32, 32, 3), dtype=np.float32),
        np.zeros((32, 32), dtype=np.uint8),
        np.zeros((32, 32, 4), dtype=np.uint8),
    ])
    def test_invalid_carrier(self, bad):
        with pytest.raises(InvalidInput):
            embed_payload(bad, b"data", b"key")
        with pytest.raises(InvalidInput):
            extract_payload(bad, b"key")

    def test_clean_carrier_has_no_header(self, flat_carrier):
        with pytest.raises(HeaderCorrupt):
            extract_payload(flat_carrier, b"key")

    def test_missing_magic(self, carrier):
        stego = embed_bits(carrier, bytes_to_bits(b"JUNK" + bytes(4) + b"\x00\x00\x00\x01" + b"a"))
        with pytest.raises(HeaderCorrupt, match="magic"):
            extract_payload(stego, b"")

    @pytest.mark.parametrize("length", [b"\x00\x00\x00\x00", b"\xff\xff\xff\xff"])
    def test_implausible_length(self, carrier, length):
        stego = embed_bits(carrier, bytes_to_bits(MAGIC + bytes(4) + length))
        with pytest.raises(HeaderCorrupt, match="implausible"):
            extract_payload(stego, b"key")

    def test_wrong_key_fails_check_tag(self, carrier):
        # "abab" repeats to the same keystream as "ab"; only the tag tells them apart
        stego = embed_payload(carrier, b"secret message", b"ab")
        with pytest.raises(HeaderCorrupt, match="Check tag"):
            extract_payload(stego, b"abab")

    def test_damaged_body_fails_check_tag(self, carrier):
        stego = embed_payload(carrier, b"secret message", b"key")
        bits = extract_bits(stego, (12 + 14) * 8)
        bits[-1] ^= 1
        with pytest.raises(HeaderCorrupt, match="Check tag"):
            extract_payload(embed_bits(carrier, bits), b"key")

    def test_extracted_bits_are_cleared(self, carrier, monkeypatch):
        import stegano_dct.embedder as embedder

        reads = []

        def recording(*args, **kwargs):
            bits = extract_bits(*args, **kwargs)
            reads.append(bits)
            return bits

        stego = embed_payload(carrier, b"\xff" * 8, b"")
        monkeypatch.setattr(embedder, "extract_bits", recording)
        assert extract_payload(stego, b"") == b"\xff" * 8
        body = reads[-1]
        assert len(body) == 64
        assert not any(body)

    def test_tiny_carrier(self):
        tiny = np.zeros((5, 5, 3), dtype=np.uint8)
        with pytest.raises(PayloadTooLarge):
            embed_payload(tiny, b"a", b"key")
        with pytest.raises(HeaderCorrupt):
            extract_payload(tiny, b"key")

    def test_single_channel_policy(self, rng):
        policy = EmbeddingPolicy(channels=1, ratio=0.5)
        gray = rng.integers(0, 256, size=(64, 64, 1), dtype=np.uint8)
        stego = embed_payload(gray, b"grey", b"k", policy)
        assert extract_payload(stego, b"k", policy) == b"grey"
