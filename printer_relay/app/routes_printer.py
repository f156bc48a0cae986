"""Printer routes used by the station desktop UI."""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from config import get_settings

from .models import ConnectionTestResponse, MessageResponse, PrinterConfig, TicketData, TicketType
from .printing import socket_client
from .printing.jobs import print_ticket
from .printing.socket_client import PrinterError
from .utils.responses import error_response

router = APIRouter(prefix="/api/printer")
logger = logging.getLogger("printer_relay.routes")

PRINTED_MESSAGES = {
    TicketType.DAYPASS: "day pass ticket printed successfully",
    TicketType.EXITPASS: "exit pass ticket printed successfully",
}


@router.get("/config/{printer_id}")
async def get_printer_config(printer_id: str) -> dict:
    """Return the printer configuration. Every id resolves to the default printer."""
    return PrinterConfig.default(get_settings()).model_dump(by_alias=True)


@router.put("/config/{printer_id}", response_model=MessageResponse)
async def update_printer_config(printer_id: str) -> MessageResponse:
    """Acknowledge a configuration update. Nothing is stored."""
    logger.info("printer %s configuration update acknowledged", printer_id)
    return MessageResponse(message="printer configuration updated successfully")


@router.post("/test/{printer_id}", response_model=ConnectionTestResponse)
async def test_printer(printer_id: str) -> ConnectionTestResponse:
    """Check that the default printer accepts a TCP connection."""
    config = PrinterConfig.default(get_settings())
    connected = await socket_client.probe(config.ip, config.port, config.timeout)
    return ConnectionTestResponse(
        connected=connected,
        error="" if connected else "Could not connect to printer",
    )


async def _print(request: Request, ticket_type: TicketType) -> JSONResponse:
    try:
        ticket = TicketData.model_validate(json.loads(await request.body()))
        await print_ticket(ticket, ticket_type)
    # malformed JSON, validation errors and printer failures all answer 500
    except (ValueError, ArithmeticError, PrinterError) as exc:
        logger.error("%s print failed: %s", ticket_type.value, exc)
        return error_response(500, str(exc) or "Failed to print ticket")
    return JSONResponse({"message": PRINTED_MESSAGES[ticket_type]})


@router.post("/print/daypass")
async def print_daypass(request: Request) -> JSONResponse:
    return await _print(request, TicketType.DAYPASS)


@router.post("/print/exitpass")
async def print_exitpass(request: Request) -> JSONResponse:
    return await _print(request, TicketType.EXITPASS)
