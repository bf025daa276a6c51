# altrion/api/portfolio.py

from __future__ import annotations
import asyncio
from flask import Blueprint, current_app, jsonify, request

from ..domain.errors import BadRequest, NotFound
from ..services.holdings_source import load_holdings
from ..services.portfolio import (
    aggregate,
    allocation_by_type,
    filter_by_type,
    find_asset,
    platform_summary,
    portfolio_totals,
)
from ..services.connection import ConnectionStatusSimulator, platform_by_id
from ..utils.config import settings
from .routes import current_user_id
from .schemas import ConnectRequest

bp = Blueprint("portfolio_api", __name__)


@bp.get("/portfolio")
def portfolio():
    """
    GET /portfolio?tab=all|crypto|stocks|cash
    Aggregated assets for the tab plus portfolio-wide totals.
    """
    holdings = load_holdings()
    assets = filter_by_type(aggregate(holdings), request.args.get("tab", "all"))
    return jsonify({
        **portfolio_totals(holdings),
        "assets": [a.to_dict() for a in assets],
        "allocation": allocation_by_type(holdings),
        "platforms": platform_summary(holdings),
    })


@bp.get("/portfolio/assets/<symbol>")
def asset_detail(symbol: str):
    asset = find_asset(load_holdings(), symbol)
    if asset is None:
        raise NotFound(f"Asset {symbol} not found in your portfolio")
    return jsonify(asset.to_dict())


def _sessions() -> dict:
    # user id -> simulator of that user's latest linking run (process-local)
    return current_app.config["ALTRION_CONNECTIONS"]


def _connections_payload(sim: ConnectionStatusSimulator):
    return jsonify({
        "connections": [a.to_dict() for a in sim.attempts],
        "allComplete": sim.all_complete,
        "successCount": sim.success_count,
    })


@bp.post("/connections")
def connect_platforms():
    """
    POST /connections  {"platforms": ["coinbase", "metamask"]}
    Runs every link attempt concurrently and reports each outcome.
    The run is kept per user so failed platforms can be retried.
    """
    req = ConnectRequest.from_json(request.get_json(force=True, silent=True) or {})
    unknown = [p for p in req.platforms if platform_by_id(p) is None]
    if unknown:
        raise BadRequest(f"unknown platforms: {', '.join(unknown)}")

    sim = ConnectionStatusSimulator(timeout=settings.CONNECT_TIMEOUT_SECONDS)
    asyncio.run(sim.start(req.platforms))
    _sessions()[current_user_id()] = sim
    return _connections_payload(sim)


@bp.get("/connections")
def connection_status():
    sim = _sessions().get(current_user_id())
    if sim is None:
        raise NotFound("no platform connections started")
    return _connections_payload(sim)


@bp.post("/connections/<platform_id>/retry")
def retry_connection(platform_id: str):
    """Re-run one failed attempt; 409 unless it is in the error state."""
    sim = _sessions().get(current_user_id())
    index = sim.index_of(platform_id) if sim is not None else -1
    if index < 0:
        raise NotFound(f"no connection attempt for {platform_id}")
    asyncio.run(sim.retry(index))
    return _connections_payload(sim)
