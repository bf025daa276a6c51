# altrion/services/loan_engine.py

from typing import Dict, Mapping, Optional
from ..domain import loan_policy
from ..domain.errors import BadRequest
from ..domain.models import ApplicationSnapshot, Eligibility, Holding, LoanApplication
from ..utils.amortization import amortization_schedule, fmt
from .collateral import CollateralSelector


def compute_eligibility(
    selection: Mapping[str, float],
    catalog: Mapping[str, Holding],
    ltv: Optional[float] = None,
    rate: Optional[float] = None,
) -> Eligibility:
    """
    totalCollateral = sum(qty * price) over the selection
    maxLoanAmount   = totalCollateral * ltv / 100

    `ltv` and `rate` are percents and default to the loan policy.
    Ids missing from the catalog contribute nothing.
    """
    ltv = loan_policy.MAX_LTV_PERCENT if ltv is None else float(ltv)
    rate = loan_policy.INTEREST_RATE_PERCENT if rate is None else float(rate)

    total = 0.0
    for asset_id, qty in selection.items():
        h = catalog.get(asset_id)
        if h is not None:
            total += float(qty) * h.price

    return Eligibility(
        total_collateral=total,
        max_loan_amount=total * ltv / 100.0,
        interest_rate=rate,
        ltv=ltv,
    )


def eligibility_for(selector: CollateralSelector, ltv: float = None, rate: float = None) -> Eligibility:
    catalog = {i: selector.holding(i) for i in selector.selected_ids()}
    return compute_eligibility(selector.selection(), catalog, ltv=ltv, rate=rate)


def build_application_snapshot(
    selector: CollateralSelector,
    ltv: float = None,
    rate: float = None,
) -> ApplicationSnapshot:
    """Freeze the current selection into a submission; empty selections are refused."""
    if len(selector) == 0:
        raise BadRequest("select at least one asset as collateral")
    elig = eligibility_for(selector, ltv=ltv, rate=rate)
    return ApplicationSnapshot(
        total_collateral=elig.total_collateral,
        loan_amount=elig.max_loan_amount,
        interest_rate=elig.interest_rate,
        ltv=elig.ltv,
        selected_assets=tuple(selector.snapshot()),
    )


def eligibility_to_dict(e: Eligibility) -> Dict:
    return {
        "totalCollateral": fmt(e.total_collateral),
        "maxLoanAmount": fmt(e.max_loan_amount),
        "interestRate": e.interest_rate,
        "ltv": e.ltv,
    }


def loan_summary(app: LoanApplication, months: int = None) -> Dict:
    """Headline repayment figures for an application's loan amount."""
    months = loan_policy.DEFAULT_TERM_MONTHS if months is None else months
    sched = amortization_schedule(app.loan_amount, app.interest_rate, months)
    return {
        "months": months,
        "monthlyPayment": fmt(sched.monthly_payment),
        "totalInterest": fmt(sched.total_interest),
        "totalRepayment": fmt(app.loan_amount + sched.total_interest),
    }
