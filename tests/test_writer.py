"""Tests for the capacity-bounded output buffer."""

from __future__ import annotations

import pytest

from sweph_json.writer import BoundedWriter


def test_writer_keeps_terminator_slot() -> None:
    """At most capacity - 1 bytes are stored; the overflow sets truncated."""
    w = BoundedWriter(5)
    assert w.append('abcd') is True
    assert w.truncated is False
    assert w.remaining() == 1
    assert w.append('e') is False
    assert w.truncated is True
    assert w.getvalue() == 'abcd'
    assert w.cursor == 4


def test_writer_partial_write_returns_bytes_written() -> None:
    """write() reports how much of a long fragment fit."""
    w = BoundedWriter(8)
    assert w.write('hello world') == 7
    assert w.getvalue() == 'hello w'


def test_writer_never_splits_utf8_character() -> None:
    """A multi-byte character that does not fit whole is dropped."""
    w = BoundedWriter(4)
    assert w.write('a°°') == 3
    assert w.getvalue() == 'a°'
    w = BoundedWriter(3)
    w.write('a°')
    assert w.getvalue() == 'a'
    assert w.truncated is True


def test_writer_near_capacity_and_fits() -> None:
    """Threshold checks count the terminator slot; fits() honours a reserve."""
    w = BoundedWriter(100)
    w.append('x' * 60)
    assert w.remaining() == 40
    assert w.is_near_capacity(41) is True
    assert w.is_near_capacity(40) is False
    assert w.fits('y' * 39) is True
    assert w.fits('y' * 40) is False
    assert w.fits('y' * 30, reserve=9) is True
    assert w.fits('y' * 30, reserve=10) is False


def test_writer_release() -> None:
    """A released writer holds no text and refuses further writes."""
    w = BoundedWriter(10)
    w.append('abc')
    w.release()
    assert w.getvalue() == ''
    with pytest.raises(RuntimeError):
        w.write('d')
