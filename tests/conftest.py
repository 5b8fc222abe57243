# erp_client/tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - No real backend: every test talks to FakeBackend through httpx.MockTransport
# - Unrouted requests answer 404 {"message": "Not found"}
# - Async scenarios run with asyncio.run() inside plain test functions
# - Every call the client makes is recorded in backend.calls
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import httpx
import pytest
from PySide6 import QtCore

from erp_client.app import ErpData, create_erp_data

BASE_URL = "http://erp.test"


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]

@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    original = QtCore.qInstallMessageHandler(None)
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        for r in rx:
            if r.search(text):
                return  # swallow benign messages
        QtCore.qInstallMessageHandler(None)
        try:
            QtCore.qDebug(message)
        finally:
            QtCore.qInstallMessageHandler(handler)

    QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Fake REST backend ----------
@dataclass
class Call:
    method: str
    path: str
    params: dict
    body: Any


Reply = tuple  # (status, body)


class FakeBackend:
    """
    Route table keyed by (METHOD, path) or (METHOD, path, frozen query params).

    A route is either a fixed (status, body) reply or a callable taking the
    Call and returning one. Query-specific routes win over plain ones.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple, Any] = {}
        self.calls: list[Call] = []

    def on(self, method: str, path: str, status: int = 200, body: Any = None,
           *, params: Optional[dict] = None, handler: Optional[Callable[[Call], Reply]] = None) -> None:
        key = (method.upper(), path) if params is None else (method.upper(), path, frozenset(params.items()))
        self.routes[key] = handler if handler is not None else (status, body)

    def count(self, method: str, path: Optional[str] = None) -> int:
        return sum(1 for c in self.calls if c.method == method and (path is None or c.path == path))

    def _handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        call = Call(request.method, request.url.path, dict(request.url.params), body)
        self.calls.append(call)

        route = None
        if call.params:
            route = self.routes.get((call.method, call.path, frozenset(call.params.items())))
        if route is None and not call.params:
            route = self.routes.get((call.method, call.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})

        status, payload = route(call) if callable(route) else route
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def erp(qapp, backend: FakeBackend) -> ErpData:
    """A fully wired ErpData talking to the fake backend."""
    return create_erp_data(BASE_URL, transport=backend.transport())


# ---------- Sample data ----------
@pytest.fixture()
def inventory_rows() -> list[dict]:
    return [
        {"_id": "p1", "itemName": "Widget", "category": "Hardware", "salesRate": 120,
         "openingStock": 10, "stock": 10, "quantity": 10, "minimumStockLevel": 3},
        {"_id": "p2", "itemName": "Gadget", "category": "Hardware", "salesRate": 80,
         "openingStock": 2, "stock": 2, "quantity": 2, "minimumStockLevel": 5},
    ]


@pytest.fixture()
def supplier_rows() -> list[dict]:
    return [
        {"_id": "s1", "name": "Acme Supplies", "paymentType": "credit", "openingAmount": 0},
        {"_id": "s2", "name": "Globex", "paymentType": "debit", "openingAmount": 500},
    ]
