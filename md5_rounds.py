"""MD5 round functions and constant tables (RFC 1321).

The four nonlinear functions F, G, H, I mix three 32-bit words bit by bit;
rotate_left is the circular shift applied once per step. K, S and IV are the
fixed per-step constants, rotation amounts and initial chaining value.
"""
import math

MASK32 = 0xffffffff

BLOCK_SIZE = 64
INPUT_BUFFER_LEN = 64
DIGEST_LEN = 16

IV = (0x67452301, 0xefcdab89, 0x98badcfe, 0x10325476)

# Per-round left-rotation amounts, four per group of 16 steps
S_table = [[7, 12, 17, 22],
           [5, 9, 14, 20],
           [4, 11, 16, 23],
           [6, 10, 15, 21]]

S = tuple(S_table[i // 16][i % 4] for i in range(BLOCK_SIZE))

# floor(2^32 * |sin(i + 1)|)
K = tuple(int(4294967296 * abs(math.sin(i + 1))) & MASK32 for i in range(BLOCK_SIZE))

PADDING = b"\x80" + 63 * b"\x00"


def F(x, y, z):
    """Round 0: (x & y) | (~x & z)"""
    return ((x & y) | (~x & z)) & MASK32


def G(x, y, z):
    """Round 1: (x & z) | (y & ~z)"""
    return ((x & z) | (y & ~z)) & MASK32


def H(x, y, z):
    """Round 2: x ^ y ^ z"""
    return (x ^ y ^ z) & MASK32


def I(x, y, z):
    """Round 3: y ^ (x | ~z)"""
    return (y ^ (x | ~z)) & MASK32


ROUND_FUNCTIONS = (F, G, H, I)


def rotate_left(x, n):
    """Rotate the 32-bit word x left by n bits."""
    x = x & MASK32
    return ((x << n) | (x >> (32 - n))) & MASK32


def message_index(i):
    """Return which of the block's 16 words step i mixes in.

    Round 0 (i < 16): i
    Round 1 (i < 32): (5*i + 1) mod 16
    Round 2 (i < 48): (3*i + 5) mod 16
    Round 3 (i < 64): (7*i) mod 16
    """
    if i < 16:
        return i
    elif i < 32:
        return (5*i + 1) % 16
    elif i < 48:
        return (3*i + 5) % 16
    elif i < 64:
        return (7*i) % 16
    else:
        raise ValueError("Invalid loop index")
