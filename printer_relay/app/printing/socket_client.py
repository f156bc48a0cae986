"""Raw TCP transport to network thermal printers.

Printers listening on port 9100 accept the byte stream and usually never
answer. A job is therefore considered delivered when the printer closes the
connection after the write, or, under the default policy, when it stays
silent for the post-write settle window.
"""

from __future__ import annotations

import asyncio
import logging

SEND_TIMEOUT_MS = 5000
POST_WRITE_SETTLE_MS = 500
ASSUME_DELIVERED_ON_POST_WRITE_TIMEOUT = True

logger = logging.getLogger("printer_relay.printer")


class PrinterError(Exception):
    """Base class for printer transport failures."""


class PrinterConnectionError(PrinterError):
    """The printer refused, reset or could not be reached."""


class PrinterTimeoutError(PrinterError):
    """The printer did not complete a phase within its timeout."""


async def _close(writer: asyncio.StreamWriter, timeout: float, abort: bool = False) -> None:
    """Close the printer socket within ``timeout`` seconds.

    A graceful close flushes what is still buffered; a printer that stopped
    reading would hold it open forever, so the connection is dropped once
    the timeout passes. ``abort`` drops it straight away.
    """
    if abort:
        writer.transport.abort()
    else:
        writer.close()
    try:
        await asyncio.wait_for(writer.wait_closed(), timeout)
    except (asyncio.TimeoutError, OSError) as exc:
        writer.transport.abort()
        logger.debug("printer socket close failed: %r", exc)


async def send(
    ip: str,
    port: int,
    data: bytes,
    timeout_ms: int = SEND_TIMEOUT_MS,
    settle_ms: int = POST_WRITE_SETTLE_MS,
    assume_delivered_on_post_write_timeout: bool = ASSUME_DELIVERED_ON_POST_WRITE_TIMEOUT,
) -> None:
    """Write ``data`` to the printer at ``ip:port`` over a fresh connection.

    Raises :class:`PrinterTimeoutError` when the connection or the write does
    not complete within ``timeout_ms``, and :class:`PrinterConnectionError`
    on refused, unreachable, unresolvable or reset connections. After the
    write the call waits up to ``settle_ms`` for the printer to hang up; a
    silent printer counts as delivered when
    ``assume_delivered_on_post_write_timeout`` is set and as a timeout
    otherwise. Nothing is retried.
    """

    timeout = timeout_ms / 1000
    try:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(ip, port), timeout
        )
    except asyncio.TimeoutError as exc:
        raise PrinterTimeoutError("Printer connection timeout") from exc
    except OSError as exc:
        raise PrinterConnectionError(str(exc) or exc.__class__.__name__) from exc

    failed = True
    try:
        writer.write(data)
        try:
            await asyncio.wait_for(writer.drain(), timeout)
        except asyncio.TimeoutError as exc:
            raise PrinterTimeoutError("Printer write timeout") from exc

        try:
            # read until the printer closes its side
            await asyncio.wait_for(reader.read(), settle_ms / 1000)
        except asyncio.TimeoutError as exc:
            if not assume_delivered_on_post_write_timeout:
                raise PrinterTimeoutError("Printer connection timeout") from exc
            logger.debug(
                "no close from %s:%s after write, assuming delivered", ip, port
            )
        failed = False
    except OSError as exc:
        raise PrinterConnectionError(str(exc) or exc.__class__.__name__) from exc
    finally:
        await _close(writer, timeout, abort=failed)
    logger.info("sent %d bytes to printer %s:%s", len(data), ip, port)


async def probe(ip: str, port: int, timeout_ms: int = SEND_TIMEOUT_MS) -> bool:
    """Return whether a TCP connection to ``ip:port`` opens within the timeout.

    Nothing is written to the printer.
    """

    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(ip, port), timeout_ms / 1000
        )
    except (asyncio.TimeoutError, OSError) as exc:
        logger.info("printer %s:%s unreachable: %r", ip, port, exc)
        return False
    await _close(writer, timeout_ms / 1000)
    return True
