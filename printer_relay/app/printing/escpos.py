"""Minimal ESC/POS framing for station tickets.

Only the handful of commands the station receipts need: initialise the
printer, feed a few lines and perform a full cut. Everything between the
preamble and the trailer is sent as UTF-8 text.
"""

from __future__ import annotations

INIT = b"\x1b@"  # ESC @
FEED3 = b"\n\n\n"
CUT_FULL = b"\x1dV\x00"  # GS V 0


def encode(text: str) -> bytes:
    """Return the printer byte stream for ``text``.

    The stream always starts with ``ESC @`` and ends with three line feeds
    followed by a full cut, so its length is ``len(text.encode()) + 8``.
    """

    return b"".join([INIT, text.encode("utf-8"), FEED3, CUT_FULL])
