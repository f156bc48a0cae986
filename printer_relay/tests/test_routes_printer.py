import decimal

import pytest
from fastapi.testclient import TestClient

from printer_relay.app import routes_printer
from printer_relay.app.main import create_app
from printer_relay.app.printing import socket_client
from printer_relay.app.printing.socket_client import PrinterConnectionError

TICKET = {
    "licensePlate": "123 TU 4567",
    "destinationName": "Sousse",
    "seatNumber": 3,
    "totalAmount": 7.5,
    "basePrice": 2.5,
    "vehicleCapacity": 8,
    "createdBy": "ahmed",
    "createdAt": "2024-05-01T08:30:00Z",
    "stationName": "Station Monastir",
}


@pytest.fixture
def sent(monkeypatch):
    calls = []

    async def fake_send(ip, port, data, **kwargs):
        calls.append({"ip": ip, "port": port, "data": data, **kwargs})

    monkeypatch.setattr(socket_client, "send", fake_send)
    return calls


@pytest.fixture
def client():
    return TestClient(create_app())


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "printer-service"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.headers["X-Request-ID"]


def test_get_config_returns_default_printer(client):
    resp = client.get("/api/printer/config/anything")
    assert resp.status_code == 200
    assert resp.json() == {
        "id": "printer1",
        "name": "Local Printer",
        "ip": "192.168.192.168",
        "port": 9100,
        "width": 48,
        "timeout": 5000,
        "model": "ESC/POS",
        "enabled": True,
        "isDefault": True,
    }


def test_default_printer_follows_environment(monkeypatch, client):
    monkeypatch.setenv("PRINTER_IP", "10.1.2.3")
    monkeypatch.setenv("PRINTER_PORT", "9101")
    body = client.get("/api/printer/config/printer1").json()
    assert (body["ip"], body["port"]) == ("10.1.2.3", 9101)


def test_put_config_is_acknowledged_but_not_stored(client):
    resp = client.put("/api/printer/config/printer1", json={"ip": "10.0.0.9", "port": 9100})
    assert resp.status_code == 200
    assert resp.json() == {"message": "printer configuration updated successfully"}
    assert client.get("/api/printer/config/printer1").json()["ip"] == "192.168.192.168"


def test_connection_test_reports_unreachable_printer_with_200(monkeypatch, client):
    probed = {}

    async def fake_probe(ip, port, timeout_ms):
        probed.update(ip=ip, port=port, timeout_ms=timeout_ms)
        return False

    monkeypatch.setattr(socket_client, "probe", fake_probe)
    resp = client.post("/api/printer/test/printer1")
    assert resp.status_code == 200
    assert resp.json() == {"connected": False, "error": "Could not connect to printer"}
    assert probed == {"ip": "192.168.192.168", "port": 9100, "timeout_ms": 5000}


def test_connection_test_reports_reachable_printer(monkeypatch, client):
    async def fake_probe(ip, port, timeout_ms):
        return True

    monkeypatch.setattr(socket_client, "probe", fake_probe)
    assert client.post("/api/printer/test/printer1").json() == {"connected": True, "error": ""}


def test_print_daypass_sends_escpos_to_default_printer(sent, client):
    resp = client.post("/api/printer/print/daypass", json=TICKET)
    assert resp.status_code == 200
    assert resp.json() == {"message": "day pass ticket printed successfully"}
    assert len(sent) == 1
    job = sent[0]
    assert (job["ip"], job["port"]) == ("192.168.192.168", 9100)
    assert job["data"].startswith(b"\x1b@=====")
    assert "PASS JOURNÉE".encode() in job["data"]
    assert job["timeout_ms"] == 5000
    assert job["settle_ms"] == 500
    assert job["assume_delivered_on_post_write_timeout"] is True


def test_print_exitpass_uses_ticket_printer(sent, client):
    payload = {**TICKET, "printerConfig": {"ip": "10.0.0.42", "port": 9100}}
    resp = client.post("/api/printer/print/exitpass", json=payload)
    assert resp.status_code == 200
    assert resp.json() == {"message": "exit pass ticket printed successfully"}
    assert sent[0]["ip"] == "10.0.0.42"
    assert "Prix de base: 7.50 TND".encode() in sent[0]["data"]


def test_print_without_total_amount_is_500(sent, client):
    payload = {k: v for k, v in TICKET.items() if k != "totalAmount"}
    resp = client.post("/api/printer/print/daypass", json=payload)
    assert resp.status_code == 500
    assert "totalAmount" in resp.json()["error"]
    assert sent == []


def test_print_with_invalid_json_is_500(sent, client):
    resp = client.post(
        "/api/printer/print/exitpass",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 500
    assert resp.json()["error"]
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert sent == []


def test_printer_failure_is_500_with_message(monkeypatch, client):
    async def refused(ip, port, data, **kwargs):
        raise PrinterConnectionError("[Errno 111] Connection refused")

    monkeypatch.setattr(socket_client, "send", refused)
    resp = client.post("/api/printer/print/daypass", json=TICKET)
    assert resp.status_code == 500
    assert resp.json() == {"error": "[Errno 111] Connection refused"}


def test_preflight_is_answered_for_any_path(client):
    resp = client.options("/api/printer/print/daypass")
    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"
    assert resp.headers["Access-Control-Allow-Methods"] == "GET, POST, PUT, OPTIONS"
    assert resp.headers["Access-Control-Allow-Headers"] == "Content-Type"
    assert resp.headers["X-Request-ID"]
    assert client.options("/nowhere").status_code == 200


def test_unknown_route_is_404(client):
    resp = client.get("/api/printer/unknown")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_wrong_method_is_404(client):
    resp = client.get("/api/printer/print/daypass")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not found"}


def test_print_with_unprintable_amount_is_500_with_message(sent, client):
    resp = client.post("/api/printer/print/daypass", json={**TICKET, "totalAmount": 1e30})
    assert resp.status_code == 500
    assert "too large to print" in resp.json()["error"]
    assert sent == []


def test_arithmetic_failure_is_500_with_message(monkeypatch, client):
    async def broken(ticket, ticket_type):
        raise decimal.DivisionByZero("division by zero")

    monkeypatch.setattr(routes_printer, "print_ticket", broken)
    resp = client.post("/api/printer/print/exitpass", json=TICKET)
    assert resp.status_code == 500
    assert resp.json() == {"error": "division by zero"}
