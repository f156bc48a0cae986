"""Run one print job: format, encode, send."""
from __future__ import annotations

import logging

from config import Settings, get_settings

from ..models import PrinterTarget, TicketData, TicketType
from . import escpos, socket_client
from .ticket_format import format_ticket

logger = logging.getLogger("printer_relay.jobs")


def resolve_target(ticket: TicketData, settings: Settings) -> PrinterTarget:
    """Return the ticket's own printer, falling back to the configured one."""
    if ticket.printer_config is not None:
        return ticket.printer_config
    return PrinterTarget(ip=settings.printer_ip, port=settings.printer_port)


async def print_ticket(
    ticket: TicketData, ticket_type: TicketType, settings: Settings | None = None
) -> int:
    """Print ``ticket`` and return the number of bytes sent."""
    settings = settings or get_settings()
    target = resolve_target(ticket, settings)
    data = escpos.encode(format_ticket(ticket, ticket_type, settings=settings))
    await socket_client.send(
        target.ip,
        target.port,
        data,
        timeout_ms=settings.send_timeout_ms,
        settle_ms=settings.post_write_settle_ms,
        assume_delivered_on_post_write_timeout=settings.assume_delivered_on_post_write_timeout,
    )
    logger.info(
        "%s ticket for %s printed on %s:%s",
        TicketType(ticket_type).value,
        ticket.license_plate,
        target.ip,
        target.port,
    )
    return len(data)
