"""
Test Suite for Fiat-Shamir Oracles
==================================

Checks the hash-to-prime challenge encoding, the key derivation, and the
keystream block bound.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps.errors import MalformedInputError, MessageTooLongError
from fkps.fs_oracles import (
    CHALLENGE_BITS, MAX_BLOCKS, derive_challenge, derive_key, keystream_block, poe_transcript,
)
from fkps.groups import power, setup


@pytest.fixture(scope="module")
def group():
    return setup()


# ============================================================================
# H2P
# ============================================================================

def test_challenge_has_exactly_277_bits(group):
    x = power(2, 1234, group)
    y = power(2, 5678, group)
    transcripts = [b"", b"\x00" * 32, b"\xff" * 100, poe_transcript(x, y, 40, group)]
    for transcript in transcripts:
        for nonce in (0, 1, 2, 255, 256, 65535, (1 << 32) - 1):
            h = derive_challenge(transcript, nonce)
            assert h.bit_length() == CHALLENGE_BITS == 277


@pytest.mark.parametrize("bits", [2, 8, 64, 255, 256, 257, 512, 600])
def test_challenge_bit_length_parameter(bits):
    for nonce in range(5):
        assert derive_challenge(b"transcript", nonce, bits).bit_length() == bits


def test_challenge_is_deterministic():
    assert derive_challenge(b"abc", 7) == derive_challenge(b"abc", 7)
    assert derive_challenge(b"abc", 7) != derive_challenge(b"abc", 8)
    assert derive_challenge(b"abc", 7) != derive_challenge(b"abd", 7)


@pytest.mark.parametrize("nonce", [-1, 1 << 32])
def test_challenge_rejects_bad_nonce(nonce):
    with pytest.raises(MalformedInputError):
        derive_challenge(b"abc", nonce)


def test_challenge_rejects_short_length():
    with pytest.raises(MalformedInputError):
        derive_challenge(b"abc", 0, bits=1)


def test_transcript_binds_t(group):
    x = power(2, 99, group)
    assert poe_transcript(x, x, 40, group) != poe_transcript(x, x, 41, group)


def test_transcript_uses_canonical_elements(group):
    x = power(2, 99, group)
    y = power(2, 100, group)
    minus_x = group.modulus - x
    assert poe_transcript(x, y, 3, group) == poe_transcript(minus_x, y, 3, group)
    assert len(poe_transcript(x, y, 3, group)) == 2 * group.element_bytes + 8


# ============================================================================
# KDF and KS
# ============================================================================

def test_key_is_32_bytes_and_sign_invariant(group):
    z = power(2, 31337, group)
    key = derive_key(z, group)
    assert len(key) == 32
    assert derive_key(group.modulus - z, group) == key


def test_keystream_blocks_are_distinct():
    key = bytes(range(32))
    blocks = {keystream_block(key, i) for i in range(MAX_BLOCKS)}
    assert len(blocks) == MAX_BLOCKS
    assert all(len(b) == 32 for b in blocks)


@pytest.mark.parametrize("index", [-1, 256, 1000])
def test_keystream_index_bound(index):
    with pytest.raises(MessageTooLongError):
        keystream_block(bytes(32), index)


def test_keystream_rejects_short_key():
    with pytest.raises(MalformedInputError):
        keystream_block(bytes(16), 0)
