"""HTTP API for reading the token ledger and submitting calls."""

from __future__ import annotations

import time
from typing import Any

from fastapi import FastAPI, Header, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, StrictInt

from mintable import __version__
from mintable.host import WRITE_OPERATIONS, LedgerHost
from mintable.ledger.events import Event

# StrictInt keeps JSON booleans from coercing to 1.
Amount = StrictInt | str


class MintBody(BaseModel):
    to: str
    value: Amount


class BurnBody(BaseModel):
    value: Amount


class TransferBody(BaseModel):
    to: str
    value: Amount


class ApproveBody(BaseModel):
    spender: str
    value: Amount


class TransferFromBody(BaseModel):
    from_: str = Field(alias="from")
    to: str
    value: Amount

    model_config = {"populate_by_name": True}


_BODIES: dict[str, type[BaseModel]] = {
    "mint": MintBody,
    "burn": BurnBody,
    "transfer": TransferBody,
    "approve": ApproveBody,
    "transfer_from": TransferFromBody,
}


def _amount(raw: Amount) -> int:
    # Amounts may exceed JSON-safe integers, so decimal strings are accepted too.
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise HTTPException(status_code=422, detail=f"amount must be a decimal integer, got {raw!r}")
    return int(text)


def _serialize_event(event: Event) -> dict[str, Any]:
    data = event.to_dict()
    data["topics"] = [str(topic) if isinstance(topic, int) else topic for topic in event.record().topics]
    return data


def create_app(host: LedgerHost) -> FastAPI:
    """Create and configure the FastAPI application around ``host``."""
    started_at = time.time()

    app = FastAPI(
        title="Mintable Token Ledger API",
        description="Read balances and allowances and submit ledger calls",
        version=__version__,
    )

    # Sync endpoints run in the threadpool; LedgerHost serializes them.

    @app.get("/")
    def root() -> dict[str, Any]:
        """Root endpoint with API info."""
        return {
            "name": "Mintable Token Ledger API",
            "version": __version__,
            "endpoints": {
                "health": "GET /health",
                "token": "GET /token",
                "balance": "GET /balances/{owner}",
                "allowance": "GET /allowances/{owner}/{spender}",
                "events": "GET /events?tail=N",
                "call": "POST /calls/{operation} (X-Caller header)",
            },
        }

    @app.get("/health")
    def health() -> dict[str, Any]:
        ledger = host.bus.ledger if host.bus else None
        return {
            "status": "healthy",
            "uptime_sec": time.time() - started_at,
            "last_event_sequence": ledger.last_sequence() if ledger else None,
        }

    @app.get("/token")
    def token_info() -> dict[str, Any]:
        token = host.token
        return {
            "name": token.name(),
            "minter": token.minter(),
            "total_supply": str(token.total_supply()),
        }

    @app.get("/balances/{owner}")
    def balance_of(owner: str) -> dict[str, Any]:
        return {"owner": owner, "balance": str(host.token.balance_of(owner))}

    @app.get("/allowances/{owner}/{spender}")
    def allowance(owner: str, spender: str) -> dict[str, Any]:
        return {
            "owner": owner,
            "spender": spender,
            "allowance": str(host.token.allowance(owner, spender)),
        }

    @app.get("/events")
    def get_events(
        tail: int = Query(default=100, ge=1, le=1000, description="Number of recent events"),
    ) -> dict[str, Any]:
        """Get recent events from the ledger."""
        if host.bus is None:
            return {"count": 0, "events": []}
        events = list(host.bus.ledger.iter_events_tail(tail))
        return {
            "count": len(events),
            "last_sequence": host.bus.ledger.last_sequence(),
            "events": [_serialize_event(e) for e in events],
        }

    @app.post("/calls/{operation}")
    def call(
        operation: str,
        body: dict[str, Any],
        x_caller: str | None = Header(default=None),
    ) -> JSONResponse:
        if operation not in WRITE_OPERATIONS:
            raise HTTPException(status_code=404, detail=f"unknown operation {operation!r}")
        if not x_caller:
            raise HTTPException(status_code=400, detail="X-Caller header is required")
        try:
            parsed = _BODIES[operation].model_validate(body)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        arguments = parsed.model_dump()
        arguments["value"] = _amount(arguments["value"])

        result = host.call(x_caller, operation, **arguments)
        return JSONResponse(
            status_code=200 if result.ok else 409,
            content=result.to_dict(),
        )

    return app
