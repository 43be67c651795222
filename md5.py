"""Streaming MD5 context with a fixed-size working state.

Bytes are fed with read() (or written straight into the input buffer and
announced with commit()); every completed 64-byte block is compressed into
the running a, b, c, d accumulator. finish() pads the message, appends its
bit length and returns the 16-byte digest. The context holds no buffer that
grows with the message.
"""
import logging

from md5_rounds import (
    BLOCK_SIZE,
    DIGEST_LEN,
    INPUT_BUFFER_LEN,
    IV,
    K,
    MASK32,
    PADDING,
    ROUND_FUNCTIONS,
    S,
    message_index,
    rotate_left,
)

logger = logging.getLogger(__name__)

MASK64 = 0xffffffffffffffff


class ContextFinishedError(ValueError):
    """Raised when a context is used after finish()."""


class MD5Context:

    def __init__(self):
        """Initialize to the MD5 initial vector (IV) with nothing read."""
        self.total_length = 0
        self.input = bytearray(INPUT_BUFFER_LEN)
        self.accumulator = list(IV)
        self.digest = None
        self.finished = False

    @property
    def offset(self):
        """Position in the input buffer where the next byte lands."""
        return self.total_length % BLOCK_SIZE

    def _check_open(self):
        if self.finished:
            raise ContextFinishedError("MD5 context has already been finished")

    def _advance(self, n):
        # n bytes at self.offset are now in the input buffer
        self.total_length = (self.total_length + n) & MASK64
        if n and self.offset == 0:
            self._step()

    def read(self, data):
        """Append data to the message, compressing each block it completes.

        Any C-contiguous bytes-like object is accepted. Reading a message in several
        pieces leaves the context in the same state as reading it at once.
        """
        self._check_open()
        view = memoryview(data).cast("B")
        pos = 0
        while pos < len(view):
            offset = self.offset
            n = min(BLOCK_SIZE - offset, len(view) - pos)
            self.input[offset:offset + n] = view[pos:pos + n]
            self._advance(n)
            pos += n

    def commit(self, n):
        """Account for n bytes written directly into self.input.

        The caller writes into input[offset:offset + n] itself (e.g. from a
        shared memory view) and then commits; the block is compressed once
        it is full. A write may not run past the end of the current block.
        """
        self._check_open()
        if n < 0:
            raise ValueError("Cannot commit a negative byte count: %d" % n)
        if self.offset + n > BLOCK_SIZE:
            raise ValueError("Committing %d bytes at offset %d crosses the block boundary"
                             % (n, self.offset))
        self._advance(n)

    def _step(self):
        """Compress the 64-byte block in self.input into the accumulator."""
        a, b, c, d = self.accumulator

        for i in range(BLOCK_SIZE):
            g = message_index(i) * 4
            # message words are little-endian
            x = int.from_bytes(self.input[g:g + 4], 'little')
            temp = (a + ROUND_FUNCTIONS[i // 16](b, c, d) + K[i] + x) & MASK32
            a, b, c, d = d, (b + rotate_left(temp, S[i])) & MASK32, b, c

        for j, v in enumerate((a, b, c, d)):
            self.accumulator[j] = (self.accumulator[j] + v) & MASK32

    def finish(self):
        """Pad the message, process the final block(s) and return the digest.

        Padding is 0x80 then zeros up to 56 mod 64, followed by the message
        length in bits as a 64-bit little-endian integer. The context cannot
        be used afterwards.
        """
        self._check_open()
        offset = self.offset
        if offset < 56:
            pad_len = 56 - offset
        else:
            pad_len = 120 - offset

        logger.debug("Finishing MD5 of %d bytes with %d padding bytes",
                     self.total_length, pad_len)
        self.read(PADDING[:pad_len])
        assert self.offset == INPUT_BUFFER_LEN - 8
        self.total_length = (self.total_length - pad_len) & MASK64

        bit_length = (self.total_length * 8) & MASK64
        self.input[INPUT_BUFFER_LEN - 8:] = bit_length.to_bytes(8, 'little')
        self._step()

        self.digest = b"".join(word.to_bytes(4, 'little') for word in self.accumulator)
        assert len(self.digest) == DIGEST_LEN
        self.finished = True
        return self.digest


def md5_digest(data):
    """Return the 16-byte MD5 digest of data."""
    ctx = MD5Context()
    ctx.read(data)
    return ctx.finish()
