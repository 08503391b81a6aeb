"""String escaping for free-text fields embedded in JSON output."""

from __future__ import annotations

_ESCAPES = {
    '"': '\\"',
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
}


def escape_text(src: str | None, dest_size: int) -> str:
    """Escape a string for a JSON string literal, bounded by a destination size.

    Structural characters become two-character escapes and any other control
    character (code point below 32) becomes a single space. Copying stops
    before an escape or character would overflow the destination, keeping one
    byte free for a terminator, so the result is at most ``dest_size - 1``
    UTF-8 bytes and never ends inside an escape sequence.

    Parameters:
        src: Text to escape; None yields an empty string.
        dest_size: Destination capacity in bytes, terminator included.

    Returns:
        Escaped, possibly shortened, text.
    """
    if src is None or dest_size < 2:
        return ''
    limit = dest_size - 1
    parts: list[str] = []
    used = 0
    for c in src:
        piece = _ESCAPES.get(c)
        if piece is None:
            code = ord(c)
            if code < 32:
                piece = ' '
            elif 0xD800 <= code <= 0xDFFF:
                # Lone surrogates cannot be encoded as UTF-8.
                piece = '\ufffd'
            else:
                piece = c
        size = len(piece.encode('utf-8'))
        if used + size > limit:
            break
        parts.append(piece)
        used += size
    return ''.join(parts)
