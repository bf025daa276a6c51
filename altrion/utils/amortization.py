# altrion/utils/amortization.py

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List

from ..domain.errors import BadRequest
from ..domain.models import Schedule, ScheduleRow

Money = float


def fmt(x: float, places: str = "0.01") -> float:
    """
    Round to given decimal places (as string pattern) using HALF_UP.
    Use str(x) to avoid binary float artifacts.
    """
    return float(Decimal(str(x)).quantize(Decimal(places), rounding=ROUND_HALF_UP))


def monthly_payment(principal: Money, annual_rate_percent: float, months: int) -> float:
    """
    Level (annuity) payment:
      P * r / (1 - (1+r)^-n), with r = APR% / 100 / 12
    A zero rate degenerates to straight-line P / n.
    """
    r_m = annual_rate_percent / 100.0 / 12.0
    if r_m == 0.0:
        return principal / months
    # (1+r)^-n underflows to 0 for very long terms instead of overflowing
    denom = 1.0 - (1.0 + r_m) ** (-months)
    if denom == 0.0:
        return principal / months
    return principal * r_m / denom


def amortization_schedule(
    principal: Money,
    annual_rate_percent: float,
    months: int = 12,
) -> Schedule:
    """
    Build a fixed-payment amortization schedule, one row per month.

    Each month's interest accrues on the running balance; the rest of the
    level payment retires principal. The balance is floored at zero so
    float residue never shows up as a negative balance in the last row.
    Values are left unrounded; use `schedule_to_dict` for display.
    """
    _validate(principal, annual_rate_percent, months)

    P = float(principal)
    n = int(months)
    r_m = float(annual_rate_percent) / 100.0 / 12.0
    payment = monthly_payment(P, float(annual_rate_percent), n)

    rows: List[ScheduleRow] = []
    bal = P
    for m in range(1, n + 1):
        interest = bal * r_m
        principal_part = payment - interest
        bal = max(0.0, bal - principal_part)
        rows.append(
            ScheduleRow(
                month=m,
                payment=payment,
                principal=principal_part,
                interest=interest,
                balance=bal,
            )
        )

    return Schedule(
        rows=tuple(rows),
        monthly_payment=payment,
        total_interest=sum(r.interest for r in rows),
    )


def _finite(value, what: str) -> float:
    if isinstance(value, bool):
        raise BadRequest(f"{what} must be a number")
    try:
        x = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{what} must be a number")
    if not math.isfinite(x):
        raise BadRequest(f"{what} must be finite")
    return x


def _validate(principal, annual_rate_percent, months) -> None:
    if _finite(principal, "principal") < 0:
        raise BadRequest("principal must be a non-negative amount")
    if _finite(annual_rate_percent, "interest rate") < 0:
        raise BadRequest("interest rate must be non-negative")
    n = _finite(months, "term")
    if n <= 0 or n != int(n):
        raise BadRequest("term must be a positive whole number of months")


def schedule_to_dict(schedule: Schedule) -> Dict:
    """Cents-rounded view used by the API."""
    return {
        "monthlyPayment": fmt(schedule.monthly_payment),
        "totalInterest": fmt(schedule.total_interest),
        "schedule": [
            {
                "month": r.month,
                "payment": fmt(r.payment),
                "principal": fmt(r.principal),
                "interest": fmt(r.interest),
                "balance": fmt(r.balance),
            }
            for r in schedule.rows
        ],
    }
