"""
Per-asset balance books backing the in-memory token ledger.
"""

from typing import Dict, Tuple


# Type aliases
Owner = str  # opaque account identifier (user key or pool id)
AssetId = str  # opaque asset identifier, compared only for equality
Amount = int  # non-negative integer base units


class BalanceTable:
    """
    Balances grouped by asset: asset -> {owner -> amount}.

    Zero balances are dropped, so two tables holding the same funds compare
    equal through `get_all_balances()` regardless of history.
    """

    def __init__(self):
        self._books: Dict[AssetId, Dict[Owner, Amount]] = {}

    def get(self, owner: Owner, asset: AssetId) -> Amount:
        return self._books.get(asset, {}).get(owner, 0)

    def set(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError(f"balance must be an int: {amount!r}")
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        book = self._books.setdefault(asset, {})
        if amount:
            book[owner] = amount
            return
        book.pop(owner, None)
        if not book:
            del self._books[asset]

    def credit(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"credit must be non-negative: {amount}")
        self.set(owner, asset, self.get(owner, asset) + amount)

    def debit(self, owner: Owner, asset: AssetId, amount: Amount) -> None:
        """
        Raises:
            ValueError: negative amount or insufficient balance
        """
        if amount < 0:
            raise ValueError(f"debit must be non-negative: {amount}")
        current = self.get(owner, asset)
        if amount > current:
            raise ValueError(f"Insufficient balance: {current} < {amount}")
        self.set(owner, asset, current - amount)

    def total_supply(self, asset: AssetId) -> Amount:
        return sum(self._books.get(asset, {}).values())

    def get_balances_for_asset(self, asset: AssetId) -> Dict[Owner, Amount]:
        return dict(self._books.get(asset, {}))

    def get_all_balances(self) -> Dict[Tuple[Owner, AssetId], Amount]:
        return {(owner, asset): amt for asset, book in self._books.items() for owner, amt in book.items()}

    def __repr__(self) -> str:
        return f"BalanceTable({sum(len(b) for b in self._books.values())} entries, {len(self._books)} assets)"
