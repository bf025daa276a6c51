# altrion/services/application_store.py

import random
import string
from copy import deepcopy
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..domain import loan_policy
from ..domain.errors import BadRequest, ConflictError
from ..domain.models import ApplicationSnapshot, AssetSnapshot, LoanApplication
from ..utils.logging import get_logger
from .storage import KeyValueBackend

log = get_logger(__name__)

_ID_ALPHABET = string.ascii_uppercase + string.digits
_MAX_ID_ATTEMPTS = 32


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LoanApplicationStore:
    """
    Submitted loan applications for one user namespace.

    Applications are stored as plain dicts (camelCase, same shape the web
    client keeps), so later changes to holdings or the collateral selection
    never reach a submitted application.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        namespace: str,
        clock: Callable[[], str] = None,
        rng: random.Random = None,
        strict: bool = False,
    ):
        self.backend = backend
        self.namespace = namespace
        self._clock = clock or _utc_now
        self._rng = rng or random.SystemRandom()
        self.strict = strict

    # ----------------- ids -----------------

    def _new_id(self) -> str:
        for _ in range(_MAX_ID_ATTEMPTS):
            suffix = "".join(self._rng.choice(_ID_ALPHABET) for _ in range(loan_policy.APPLICATION_ID_LENGTH))
            app_id = loan_policy.APPLICATION_ID_PREFIX + suffix
            if self.backend.get(self.namespace, app_id) is None:
                return app_id
            log.warning(f"application id collision id={app_id}; regenerating")
        raise ConflictError("could not allocate a unique application id")

    # ----------------- operations -----------------

    def add_application(self, snapshot: ApplicationSnapshot) -> str:
        now = self._clock()
        app = LoanApplication(
            id=self._new_id(),
            status=loan_policy.PENDING,
            total_collateral=float(snapshot.total_collateral),
            loan_amount=float(snapshot.loan_amount),
            interest_rate=float(snapshot.interest_rate),
            ltv=float(snapshot.ltv),
            selected_assets=tuple(
                AssetSnapshot(name=a.name, symbol=a.symbol, amount=a.amount, value=a.value)
                for a in snapshot.selected_assets
            ),
            submitted_at=now,
            updated_at=now,
        )
        self.backend.put(self.namespace, app.id, app.to_dict())
        log.info(
            f"loan application submitted id={app.id} amount={app.loan_amount:.2f}",
            extra={"ctx": {"namespace": self.namespace, "assets": len(app.selected_assets)}},
        )
        return app.id

    def get_application_by_id(self, app_id: str) -> Optional[LoanApplication]:
        doc = self.backend.get(self.namespace, app_id)
        return LoanApplication.from_dict(deepcopy(doc)) if doc else None

    def list_applications(self) -> List[LoanApplication]:
        apps = [LoanApplication.from_dict(deepcopy(d)) for d in self.backend.get_all(self.namespace)]
        return sorted(apps, key=lambda a: a.submitted_at, reverse=True)

    def update_application_status(self, app_id: str, status: str) -> Optional[LoanApplication]:
        """
        Overwrite status and updatedAt. Any status may follow any other unless
        the store is strict, in which case loan_policy.STATUS_TRANSITIONS applies.
        """
        if status not in loan_policy.APPLICATION_STATUSES:
            raise BadRequest(f"unknown application status: {status}")
        app = self.get_application_by_id(app_id)
        if app is None:
            return None
        if self.strict and not loan_policy.can_transition(app.status, status):
            raise ConflictError(f"cannot move application {app_id} from {app.status} to {status}")

        previous = app.status
        app.status = status
        app.updated_at = self._clock()
        self.backend.put(self.namespace, app.id, app.to_dict())
        log.info(f"loan application status id={app_id} {previous}->{status}")
        return app

    def cancel_application(self, app_id: str) -> bool:
        """Remove a pending application. False when it does not exist."""
        app = self.get_application_by_id(app_id)
        if app is None:
            return False
        if app.status != loan_policy.PENDING:
            raise ConflictError(f"only pending applications can be cancelled (status={app.status})")
        self.backend.delete(self.namespace, app_id)
        log.info(f"loan application cancelled id={app_id}")
        return True


def store_for(backend: KeyValueBackend, user_id: str, **kwargs) -> LoanApplicationStore:
    return LoanApplicationStore(backend, namespace=f"loan-applications:{user_id}", **kwargs)


def status_counts(apps: List[LoanApplication]) -> Dict[str, int]:
    counts = {s: 0 for s in loan_policy.APPLICATION_STATUSES}
    for a in apps:
        counts[a.status] = counts.get(a.status, 0) + 1
    return counts
