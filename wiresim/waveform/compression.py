"""
Compression of int16 ADC sequences.

Huffman scheme (lossless for any int16 sequence). Output words are int16:

- word 0 holds the first sample;
- a word with bit 15 set packs prefix codes for consecutive sample
  differences into bits 14..0, most significant first. Codes are a run of
  zeros closed by a one:  0 -> 1, -1 -> 01, +1 -> 001, -2 -> 0001,
  +2 -> 00001, -3 -> 000001, +3 -> 0000001. Unused low bits are zero;
- a word equal to 0 is an escape: the next word is the literal sample.

A code never spans two words.
"""

import numpy as np # type: ignore

from wiresim.core.datatypes import Compression

DIFF_CODES = (0, -1, 1, -2, 2, -3, 3)          # code length = index + 1
CODE_LENGTH = {d: i + 1 for i, d in enumerate(DIFF_CODES)}
PAYLOAD_BITS = 15
FLAG = 0x8000
ESCAPE = 0


def _to_int16(word: int) -> int:
    word &= 0xFFFF
    return word - 0x10000 if word & FLAG else word


def compress_huffman(adc: np.ndarray) -> np.ndarray:
    """Encode an int16 sequence; see module docstring for the word layout."""
    samples = np.asarray(adc, dtype=np.int64)
    if len(samples) == 0:
        return np.zeros(0, dtype=np.int16)

    words = [int(samples[0])]
    payload, free = 0, PAYLOAD_BITS

    def flush():
        nonlocal payload, free
        if free < PAYLOAD_BITS:
            words.append(_to_int16(FLAG | payload))
        payload, free = 0, PAYLOAD_BITS

    for sample, diff in zip(samples[1:], np.diff(samples)):
        length = CODE_LENGTH.get(int(diff))
        if length is None:
            flush()
            words.extend((ESCAPE, int(sample)))
            continue
        if length > free:
            flush()
        free -= length
        payload |= 1 << free

    flush()
    return np.array(words, dtype=np.int16)


def uncompress_huffman(words: np.ndarray, n_samples: int) -> np.ndarray:
    """
    Decode `n_samples` samples from Huffman words.

    Raises:
        ValueError: if the words are truncated or not a valid encoding
    """
    words = np.asarray(words, dtype=np.int16)
    if n_samples == 0:
        return np.zeros(0, dtype=np.int16)
    if len(words) == 0:
        raise ValueError(f"No compressed words to decode {n_samples} samples from")

    out = [int(words[0])]
    i = 1
    while len(out) < n_samples:
        if i >= len(words):
            raise ValueError(f"Compressed data ends after {len(out)} of {n_samples} samples")
        word = int(words[i]) & 0xFFFF
        if word & FLAG:
            zeros = 0
            for bit in range(PAYLOAD_BITS - 1, -1, -1):
                if (word >> bit) & 1:
                    if zeros >= len(DIFF_CODES):
                        raise ValueError(f"Invalid prefix code in word {i}")
                    out.append(out[-1] + DIFF_CODES[zeros])
                    zeros = 0
                else:
                    zeros += 1
            i += 1
        elif word == ESCAPE:
            if i + 1 >= len(words):
                raise ValueError("Escape word without literal sample")
            out.append(int(words[i + 1]))
            i += 2
        else:
            raise ValueError(f"Unexpected word {word:#06x} at position {i}")

    if len(out) != n_samples:
        raise ValueError(f"Decoded {len(out)} samples, expected {n_samples}")
    return np.array(out, dtype=np.int16)


def compress(adc: np.ndarray, compression: Compression) -> np.ndarray:
    """Apply the selected scheme; NONE returns an int16 copy."""
    if compression is Compression.HUFFMAN:
        return compress_huffman(adc)
    return np.array(adc, dtype=np.int16)


def uncompress(adc: np.ndarray, n_samples: int, compression: Compression) -> np.ndarray:
    """Inverse of `compress`."""
    if compression is Compression.HUFFMAN:
        return uncompress_huffman(adc, n_samples)
    adc = np.array(adc, dtype=np.int16)
    if len(adc) != n_samples:
        raise ValueError(f"Uncompressed digit holds {len(adc)} samples, expected {n_samples}")
    return adc
