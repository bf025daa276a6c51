# altrion/api/routes.py
from flask import Blueprint, current_app, jsonify, request
from ..utils.config import settings
from ..utils.logging import get_logger
from ..utils.amortization import amortization_schedule, schedule_to_dict
from ..domain import loan_policy
from ..domain.errors import ConflictError, NotFound
from ..services.holdings_source import load_holdings
from ..services.collateral import CollateralSelector
from ..services.loan_engine import (
    build_application_snapshot,
    eligibility_for,
    eligibility_to_dict,
    loan_summary,
)
from ..services.application_store import status_counts, store_for
from .schemas import CollateralRequest, StatusUpdate, parse_months

bp = Blueprint('api', __name__)
log = get_logger(__name__)


def current_user_id() -> str:
    # identity is resolved upstream (auth service); we only read it
    return request.headers.get("X-User-Id") or "anonymous"


def _store():
    return store_for(
        current_app.config["ALTRION_BACKEND"],
        current_user_id(),
        strict=settings.STRICT_STATUS_TRANSITIONS,
    )


def _selector_from_request() -> CollateralSelector:
    body = request.get_json(force=True, silent=True) or {}
    req = CollateralRequest.from_json(body)
    selector = CollateralSelector(load_holdings())
    for asset_id in req.asset_ids:
        selector.select(asset_id)
    for asset_id, qty in req.selection.items():
        selector.set_amount(asset_id, qty)
    for asset_id, pct in req.percentages.items():
        selector.set_percentage(asset_id, pct)
    return selector


@bp.post('/loan/eligibility')
def loan_eligibility():
    selector = _selector_from_request()
    out = eligibility_to_dict(eligibility_for(selector))
    out["selectedAssets"] = [a.to_dict() for a in selector.snapshot()]
    return jsonify(out)


@bp.post('/loan/applications')
def submit_application():
    selector = _selector_from_request()
    snapshot = build_application_snapshot(selector)  # BadRequest when empty
    store = _store()
    app_id = store.add_application(snapshot)
    return jsonify({"id": app_id, "application": store.get_application_by_id(app_id).to_dict()}), 201


@bp.get('/loan/applications')
def list_applications():
    apps = _store().list_applications()
    return jsonify({
        "applications": [a.to_dict() for a in apps],
        "counts": status_counts(apps),
    })


@bp.get('/loan/applications/<app_id>')
def get_application(app_id: str):
    app = _store().get_application_by_id(app_id)
    if app is None:
        raise NotFound(f"application {app_id} not found")
    return jsonify({**app.to_dict(), "summary": loan_summary(app)})


@bp.patch('/loan/applications/<app_id>/status')
def update_status(app_id: str):
    body = request.get_json(force=True, silent=True) or {}
    upd = StatusUpdate.from_json(body)
    app = _store().update_application_status(app_id, upd.status)
    if app is None:
        raise NotFound(f"application {app_id} not found")
    return jsonify(app.to_dict())


@bp.delete('/loan/applications/<app_id>')
def cancel_application(app_id: str):
    if not _store().cancel_application(app_id):
        raise NotFound(f"application {app_id} not found")
    return "", 204


@bp.get('/loan/applications/<app_id>/schedule')
def application_schedule(app_id: str):
    app = _store().get_application_by_id(app_id)
    if app is None:
        raise NotFound(f"application {app_id} not found")
    if app.status != loan_policy.ACTIVE:
        raise ConflictError(f"payment schedule is only available for active loans (status={app.status})")
    months = parse_months(
        request.args.get("months"), loan_policy.DEFAULT_TERM_MONTHS, loan_policy.MAX_TERM_MONTHS
    )
    sched = amortization_schedule(app.loan_amount, app.interest_rate, months)
    return jsonify({"id": app.id, "status": app.status, "months": months, **schedule_to_dict(sched)})
