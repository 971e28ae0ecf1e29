"""POSIX shell escaping for command-line arguments.

:func:`escape` is the single quoting routine used by every driver.  The
law it guarantees is::

    shlex.split(escape(*tokens)) == list(tokens)

for any tokens, including empty strings, embedded whitespace, quotes,
newlines and shell metacharacters (``$ ` ; | &``).
"""

from __future__ import annotations

import os
import shlex

from mediakit.exceptions import ArgumentEscapeError

Token = str | os.PathLike[str]


def escape(*tokens: Token) -> str:
    """Quote each token individually and join them with single spaces."""
    return " ".join(shlex.quote(os.fspath(token)) for token in tokens)


def split(args: str) -> list[str]:
    """Tokenise a pre-formed argument string with POSIX shell rules.

    Raises
    ------
    ArgumentEscapeError
        When *args* has unbalanced quotes or a dangling escape.
    """
    try:
        return shlex.split(args)
    except ValueError as exc:
        raise ArgumentEscapeError(
            f"cannot tokenise arguments {args!r}: {exc}",
        ) from exc


def escape_string(args: str) -> str:
    """Re-escape an already-joined argument string.

    The string is split into words (see :func:`split`) and every word is
    quoted again, so whatever the caller meant as separate words stays
    separate words and nothing is interpreted by the shell.
    """
    return escape(*split(args))
