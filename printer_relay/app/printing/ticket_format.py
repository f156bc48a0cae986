"""Render station tickets as fixed-width receipt text."""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from jinja2 import Environment, FileSystemLoader

from config import ExitPassPricing, Settings, get_settings

from ..models import TicketData, TicketType

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates" / "escpos"
_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)

TEMPLATE_MAP: Dict[TicketType, str] = {
    TicketType.DAYPASS: "daypass.txt",
    TicketType.EXITPASS: "exitpass.txt",
}

# each pricing policy keeps the wording of the station build it comes from
EXIT_PASS_LABELS: Dict[ExitPassPricing, Dict[str, str]] = {
    ExitPassPricing.SERVICE_FEE_ON_EMPTY: {
        "seats_label": "Sièges réservés",
        "price_label": "Prix de base",
        "total_label": "Montant Total",
    },
    ExitPassPricing.BASE_PRICE_ONLY: {
        "seats_label": "Sièges",
        "price_label": "Prix",
        "total_label": "Total",
    },
}

RULE = "=" * 32
# blank lines left before the cut
TRAILING_BLANK_LINES = 3


def money(value: Decimal) -> str:
    """Format ``value`` with two decimals, rounding half up."""
    try:
        return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ValueError(f"amount {value} is too large to print") from exc


def banner(settings: Settings) -> List[str]:
    return [
        RULE,
        f"  {settings.banner_company}",
        f"     {settings.banner_activity}",
        RULE,
    ]


def _local_time(value: datetime, tz_name: str) -> datetime:
    # naive timestamps are already station time
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name))


def exit_pass_pricing(
    ticket: TicketData, pricing: ExitPassPricing, fee_per_seat: Decimal
) -> Dict[str, Optional[str]]:
    """Return the exit-pass pricing lines for ``ticket`` under ``pricing``.

    Nothing is printed unless both ``base_price`` and ``seat_number`` are
    set. With :attr:`ExitPassPricing.SERVICE_FEE_ON_EMPTY` a full vehicle
    (``seat_number == vehicle_capacity``) is charged ``fee_per_seat`` per
    seat of capacity; every other case prints ``base_price * seat_number``.
    The ticket total is never derived from these figures.
    """

    pricing = ExitPassPricing(pricing)
    result: Dict[str, Optional[str]] = {"service_fee": None, "base_total": None}
    if not (ticket.base_price and ticket.seat_number):
        return result
    if (
        pricing is ExitPassPricing.SERVICE_FEE_ON_EMPTY
        and ticket.vehicle_capacity
        and ticket.seat_number == ticket.vehicle_capacity
    ):
        result["service_fee"] = money(fee_per_seat * ticket.vehicle_capacity)
    else:
        result["base_total"] = money(ticket.base_price * ticket.seat_number)
    return result


def format_ticket(
    ticket: TicketData,
    ticket_type: TicketType,
    pricing: ExitPassPricing | None = None,
    settings: Settings | None = None,
) -> str:
    """Return the receipt text for ``ticket``.

    The text is the banner, a blank line, the body rendered from the
    template of ``ticket_type``, an optional staff footer and three blank
    lines. ``pricing`` defaults to the configured exit-pass policy.
    """

    settings = settings or get_settings()
    pricing = ExitPassPricing(pricing or settings.exit_pass_pricing)
    ticket_type = TicketType(ticket_type)

    created = _local_time(ticket.created_at, settings.ticket_timezone)
    context: Dict[str, Any] = {
        "license_plate": ticket.license_plate,
        "route_name": ticket.route_name,
        "destination_name": ticket.destination_name,
        "seat_number": ticket.seat_number,
        "vehicle_capacity": ticket.vehicle_capacity,
        "total": money(ticket.total_amount),
        "currency": settings.currency,
        "date": created.strftime("%d/%m/%Y"),
        "time": created.strftime("%H:%M"),
        "created_by": ticket.created_by,
    }
    if ticket_type is TicketType.EXITPASS:
        context.update(
            exit_pass_pricing(ticket, pricing, settings.service_fee_per_seat)
        )
        context.update(EXIT_PASS_LABELS[pricing])

    template = _env.get_template(TEMPLATE_MAP[ticket_type])
    lines = banner(settings)
    lines.append("")
    lines.extend(template.render(**context).splitlines())
    if ticket.staff_first_name and ticket.staff_last_name:
        lines.append(f"Agent: {ticket.staff_first_name} {ticket.staff_last_name}")
    lines.extend([""] * TRAILING_BLANK_LINES)
    return "\n".join(lines)
