"""Split a role's SQL template into individually executable statements."""

from enum import Enum


class _State(Enum):
    NORMAL = 0
    SINGLE_QUOTE = 1
    DOUBLE_QUOTE = 2
    LINE_COMMENT = 3
    BLOCK_COMMENT = 4


_QUOTE_STATES = {"'": _State.SINGLE_QUOTE, '"': _State.DOUBLE_QUOTE}
_CLOSING_QUOTE = {_State.SINGLE_QUOTE: "'", _State.DOUBLE_QUOTE: '"'}


def split_statements(sql: str) -> list[str]:
    """Split *sql* on ``;`` outside of quoted literals and comments.

    - ``'...'`` and ``"..."`` are kept verbatim; a doubled quote inside them
      (``'it''s'``) does not close the literal.
    - ``-- ...`` runs to the end of the line and ``/* ... */`` to its closing
      marker; comment text is dropped (a block comment leaves one space).
    - Statements are stripped and empty ones are dropped.
    - Input ending inside a literal or comment is not an error: whatever was
      collected is emitted as the last statement.
    """
    stmts: list[str] = []
    current: list[str] = []
    state = _State.NORMAL
    i = 0
    length = len(sql)

    def flush() -> None:
        stmt = "".join(current).strip()
        if stmt:
            stmts.append(stmt)
        current.clear()

    while i < length:
        ch = sql[i]
        nxt = sql[i + 1] if i + 1 < length else ""

        if state is _State.NORMAL:
            if ch == ";":
                flush()
            elif ch in _QUOTE_STATES:
                state = _QUOTE_STATES[ch]
                current.append(ch)
            elif ch == "-" and nxt == "-":
                state = _State.LINE_COMMENT
                i += 1
            elif ch == "/" and nxt == "*":
                state = _State.BLOCK_COMMENT
                i += 1
            else:
                current.append(ch)

        elif state in _CLOSING_QUOTE:
            current.append(ch)
            if ch == _CLOSING_QUOTE[state]:
                if nxt == ch:
                    current.append(nxt)
                    i += 1
                else:
                    state = _State.NORMAL

        elif state is _State.LINE_COMMENT:
            if ch == "\n":
                current.append(ch)
                state = _State.NORMAL

        else:  # BLOCK_COMMENT
            if ch == "*" and nxt == "/":
                current.append(" ")
                state = _State.NORMAL
                i += 1

        i += 1

    flush()
    return stmts
