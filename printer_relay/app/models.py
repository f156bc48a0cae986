"""Wire models for the printer relay.

The desktop UI speaks camelCase JSON; attributes are snake_case and the wire
names are kept as aliases. Unknown keys sent by the UI are ignored.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config import Settings


class TicketType(str, Enum):
    DAYPASS = "daypass"
    EXITPASS = "exitpass"


class PrinterTarget(BaseModel):
    """Printer address carried by a ticket to override the default printer."""

    ip: str
    port: int


class TicketData(BaseModel):
    """One ticket to print. Built per request and discarded afterwards."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    license_plate: str = Field(alias="licensePlate")
    destination_name: Optional[str] = Field(default=None, alias="destinationName")
    route_name: Optional[str] = Field(default=None, alias="routeName")
    station_name: Optional[str] = Field(default=None, alias="stationName")
    seat_number: int = Field(default=0, alias="seatNumber")
    total_amount: Decimal = Field(alias="totalAmount")
    base_price: Optional[Decimal] = Field(default=None, alias="basePrice")
    created_by: str = Field(alias="createdBy")
    created_at: datetime = Field(alias="createdAt")
    staff_first_name: Optional[str] = Field(default=None, alias="staffFirstName")
    staff_last_name: Optional[str] = Field(default=None, alias="staffLastName")
    vehicle_capacity: Optional[int] = Field(default=None, alias="vehicleCapacity")
    exit_pass_count: Optional[int] = Field(default=None, alias="exitPassCount")
    printer_config: Optional[PrinterTarget] = Field(default=None, alias="printerConfig")


class PrinterConfig(BaseModel):
    """Printer settings as exposed to the UI. ``timeout`` is in milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    ip: str
    port: int
    width: int
    timeout: int
    model: str
    enabled: bool = True
    is_default: bool = Field(default=False, alias="isDefault")

    @classmethod
    def default(cls, settings: Settings) -> "PrinterConfig":
        return cls(
            id=settings.printer_id,
            name=settings.printer_name,
            ip=settings.printer_ip,
            port=settings.printer_port,
            width=settings.printer_width,
            timeout=settings.printer_timeout_ms,
            model=settings.printer_model,
            enabled=True,
            is_default=True,
        )


class MessageResponse(BaseModel):
    message: str


class ConnectionTestResponse(BaseModel):
    connected: bool
    error: str = ""
