"""Capacity-bounded output buffer for JSON documents."""

from __future__ import annotations


class BoundedWriter:
    """Append-only UTF-8 text buffer that never grows past its capacity.

    One byte of the capacity is kept for a terminator, so at most
    ``capacity - 1`` bytes of text are ever stored. A fragment that does not
    fit is cut at the last whole character that does; the writer then records
    that it truncated instead of raising.
    """

    def __init__(self, capacity: int) -> None:
        """Allocate a buffer of capacity bytes (terminator slot included)."""
        self._capacity = max(int(capacity), 1)
        self._buffer: bytearray | None = bytearray(self._capacity)
        self._cursor = 0
        self.truncated = False

    @property
    def capacity(self) -> int:
        """Total capacity in bytes."""
        return self._capacity

    @property
    def cursor(self) -> int:
        """Number of bytes written so far."""
        return self._cursor

    def remaining(self) -> int:
        """Return bytes left, counting the reserved terminator slot."""
        return self._capacity - self._cursor

    def is_near_capacity(self, threshold: int) -> bool:
        """True when fewer than threshold bytes remain."""
        return self.remaining() < threshold

    def fits(self, fragment: str, reserve: int = 0) -> bool:
        """True if fragment can be written whole while leaving reserve bytes free.

        Parameters:
            fragment: Text to test.
            reserve: Bytes that must stay available after the fragment.
        """
        return len(fragment.encode('utf-8')) + reserve <= self.remaining() - 1

    def write(self, fragment: str) -> int:
        """Write as much of fragment as fits and return the number of bytes written.

        Never splits a multi-byte character and never touches the terminator
        slot. Sets ``truncated`` when the fragment was cut.
        """
        if self._buffer is None:
            raise RuntimeError('BoundedWriter used after release()')
        data = fragment.encode('utf-8')
        room = self.remaining() - 1
        if len(data) > room:
            cut = room
            # Step back over UTF-8 continuation bytes so no character is split.
            while cut > 0 and (data[cut] & 0xC0) == 0x80:
                cut -= 1
            data = data[:cut]
            self.truncated = True
        n = len(data)
        self._buffer[self._cursor:self._cursor + n] = data
        self._cursor += n
        return n

    def append(self, fragment: str) -> bool:
        """Write fragment and report whether it was written in full."""
        return self.write(fragment) == len(fragment.encode('utf-8'))

    def getvalue(self) -> str:
        """Return the text written so far."""
        if self._buffer is None:
            return ''
        return self._buffer[:self._cursor].decode('utf-8')

    def release(self) -> None:
        """Drop the underlying storage; the writer must not be used afterwards."""
        self._buffer = None
        self._cursor = 0
