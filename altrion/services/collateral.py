# altrion/services/collateral.py

from typing import Dict, Iterable, List, Optional
from ..domain.models import AssetSnapshot, Holding


class CollateralSelector:
    """
    Which holdings are pledged, and how much of each.

    Invariant: 0 <= pledged[asset] <= holding.amount for every selected asset.
    A deselected asset has no entry at all (absence, not zero).
    Ids missing from the catalog are ignored by every operation.
    """

    def __init__(self, catalog: Iterable[Holding]):
        self._catalog: Dict[str, Holding] = {h.id: h for h in catalog}
        self._pledged: Dict[str, float] = {}

    # ----------------- mutations -----------------

    def select(self, asset_id: str) -> None:
        asset = self._catalog.get(asset_id)
        if asset is None or asset_id in self._pledged:
            return
        self._pledged[asset_id] = asset.amount

    def deselect(self, asset_id: str) -> None:
        self._pledged.pop(asset_id, None)

    def set_amount(self, asset_id: str, amount: float) -> None:
        """Clamp into [0, holdings]; out-of-range input is corrected, not rejected."""
        asset = self._catalog.get(asset_id)
        if asset is None:
            return
        self._pledged[asset_id] = max(0.0, min(float(amount), asset.amount))

    def set_percentage(self, asset_id: str, percent: float) -> None:
        asset = self._catalog.get(asset_id)
        if asset is None:
            return
        self.set_amount(asset_id, asset.amount * float(percent) / 100.0)

    def select_all(self, asset_ids: Iterable[str]) -> None:
        """
        Toggle a filtered set: when every id is already selected they are all
        deselected, otherwise each unselected id is selected at full holdings.
        Quantities already pledged are left alone.
        """
        ids = [i for i in asset_ids if i in self._catalog]
        if ids and all(i in self._pledged for i in ids):
            self.deselect_all(ids)
            return
        for i in ids:
            self.select(i)

    def deselect_all(self, asset_ids: Iterable[str]) -> None:
        for i in asset_ids:
            self.deselect(i)

    # ----------------- reads -----------------

    def is_selected(self, asset_id: str) -> bool:
        return asset_id in self._pledged

    def amount_of(self, asset_id: str) -> Optional[float]:
        return self._pledged.get(asset_id)

    def percent_used(self, asset_id: str) -> float:
        asset = self._catalog.get(asset_id)
        qty = self._pledged.get(asset_id)
        if asset is None or qty is None or asset.amount <= 0:
            return 0.0
        return qty / asset.amount * 100.0

    def selection_state(self, asset_ids: Iterable[str]) -> str:
        """Checkbox state for a filtered set: 'none', 'some' or 'all'."""
        ids = [i for i in asset_ids if i in self._catalog]
        count = sum(1 for i in ids if i in self._pledged)
        if ids and count == len(ids):
            return "all"
        return "some" if count else "none"

    def selected_ids(self) -> List[str]:
        return list(self._pledged)

    def selection(self) -> Dict[str, float]:
        return dict(self._pledged)

    def holding(self, asset_id: str) -> Optional[Holding]:
        return self._catalog.get(asset_id)

    def total_value(self) -> float:
        return sum(qty * self._catalog[i].price for i, qty in self._pledged.items())

    def snapshot(self) -> List[AssetSnapshot]:
        """Value copies of the pledged assets, in selection order."""
        out = []
        for i, qty in self._pledged.items():
            h = self._catalog[i]
            out.append(AssetSnapshot(name=h.name, symbol=h.symbol, amount=qty, value=qty * h.price))
        return out

    def __len__(self) -> int:
        return len(self._pledged)
