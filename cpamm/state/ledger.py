"""
Token ledger collaborator.

The pool engine never moves balances itself; it emits `LedgerInstruction`s and
hands them to a `TokenLedger`. Each ledger call is atomic on its own;
`execute_instructions` makes a whole batch all-or-nothing by compensating
already-applied instructions when a later one fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterable, Optional, Protocol, Sequence, Set, Tuple

from ..core.errors import LedgerError
from .balances import Amount, AssetId, BalanceTable, Owner


logger = logging.getLogger(__name__)


class TokenLedger(Protocol):
    def transfer(self, asset: AssetId, source: Owner, dest: Owner, amount: Amount) -> None: ...

    def mint(self, asset: AssetId, dest: Owner, amount: Amount) -> None: ...

    def burn(self, asset: AssetId, source: Owner, amount: Amount) -> None: ...


@unique
class InstructionKind(Enum):
    TRANSFER = "TRANSFER"
    MINT = "MINT"
    BURN = "BURN"


@dataclass(frozen=True)
class LedgerInstruction:
    """
    One balance movement. `source` is unused for MINT, `dest` for BURN.
    """
    kind: InstructionKind
    asset: AssetId
    amount: Amount
    source: Optional[Owner] = None
    dest: Optional[Owner] = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or isinstance(self.amount, bool) or self.amount < 0:
            raise ValueError(f"instruction amount must be a non-negative int: {self.amount!r}")
        if self.kind in (InstructionKind.TRANSFER, InstructionKind.BURN) and self.source is None:
            raise ValueError(f"{self.kind.value} requires a source")
        if self.kind in (InstructionKind.TRANSFER, InstructionKind.MINT) and self.dest is None:
            raise ValueError(f"{self.kind.value} requires a dest")

    @classmethod
    def transfer(cls, asset: AssetId, source: Owner, dest: Owner, amount: Amount) -> "LedgerInstruction":
        return cls(kind=InstructionKind.TRANSFER, asset=asset, amount=amount, source=source, dest=dest)

    @classmethod
    def mint(cls, asset: AssetId, dest: Owner, amount: Amount) -> "LedgerInstruction":
        return cls(kind=InstructionKind.MINT, asset=asset, amount=amount, dest=dest)

    @classmethod
    def burn(cls, asset: AssetId, source: Owner, amount: Amount) -> "LedgerInstruction":
        return cls(kind=InstructionKind.BURN, asset=asset, amount=amount, source=source)

    def inverse(self) -> "LedgerInstruction":
        """The instruction that undoes this one."""
        if self.kind is InstructionKind.TRANSFER:
            return LedgerInstruction.transfer(self.asset, self.dest, self.source, self.amount)
        if self.kind is InstructionKind.MINT:
            return LedgerInstruction.burn(self.asset, self.dest, self.amount)
        return LedgerInstruction.mint(self.asset, self.source, self.amount)


def apply_instruction(ledger: TokenLedger, instruction: LedgerInstruction) -> None:
    if instruction.kind is InstructionKind.TRANSFER:
        ledger.transfer(instruction.asset, instruction.source, instruction.dest, instruction.amount)
    elif instruction.kind is InstructionKind.MINT:
        ledger.mint(instruction.asset, instruction.dest, instruction.amount)
    elif instruction.kind is InstructionKind.BURN:
        ledger.burn(instruction.asset, instruction.source, instruction.amount)
    else:
        raise ValueError(f"unknown instruction kind: {instruction.kind!r}")


def _describe(instruction: LedgerInstruction) -> str:
    return (
        f"{instruction.kind.value} {instruction.amount} of {instruction.asset} "
        f"({instruction.source} -> {instruction.dest})"
    )


def _undo(ledger: TokenLedger, applied: Sequence[LedgerInstruction]) -> list[str]:
    """Undo `applied` in reverse; every inverse is attempted even if one fails."""
    failures: list[str] = []
    for done in reversed(applied):
        try:
            apply_instruction(ledger, done.inverse())
        except Exception as undo_exc:
            failures.append(f"undo {_describe(done)}: {undo_exc}")
    return failures


def execute_instructions(ledger: TokenLedger, instructions: Sequence[LedgerInstruction]) -> None:
    """
    Apply `instructions` in order, all-or-nothing.

    On failure the applied prefix is undone in reverse order and the failure is
    raised as `LedgerError`. If an undo step itself fails, the error carries the
    failed steps in `rollback_failures` and the ledger is left partially applied.
    """
    applied: list[LedgerInstruction] = []
    try:
        for instruction in instructions:
            if instruction.amount == 0:
                continue
            apply_instruction(ledger, instruction)
            applied.append(instruction)
    except Exception as exc:
        failures = _undo(ledger, applied)
        if failures:
            logger.error(
                "Ledger rollback incomplete after %s",
                exc,
                extra={"event": "cpamm.ledger.rollback_incomplete", "rollback_failures": failures},
            )
            raise LedgerError(
                f"ledger instruction failed: {exc}; rollback incomplete: {'; '.join(failures)}",
                rollback_failures=tuple(failures),
            ) from exc
        if isinstance(exc, LedgerError):
            raise
        raise LedgerError(f"ledger instruction failed: {exc}") from exc


class InMemoryLedger:
    """
    Reference `TokenLedger` backed by a `BalanceTable`.

    `fail_on` holds (kind, asset) pairs that are rejected, which lets tests
    exercise rollback paths.
    """

    def __init__(self, balances: Optional[BalanceTable] = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self.fail_on: Set[Tuple[InstructionKind, AssetId]] = set()

    def _check(self, kind: InstructionKind, asset: AssetId, amount: Amount) -> None:
        if (kind, asset) in self.fail_on:
            raise LedgerError(f"{kind.value} of {asset} rejected")
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise LedgerError(f"invalid amount: {amount!r}")

    def transfer(self, asset: AssetId, source: Owner, dest: Owner, amount: Amount) -> None:
        self._check(InstructionKind.TRANSFER, asset, amount)
        if self.balances.get(source, asset) < amount:
            raise LedgerError(
                f"insufficient {asset} balance for {source}: {self.balances.get(source, asset)} < {amount}"
            )
        self.balances.debit(source, asset, amount)
        self.balances.credit(dest, asset, amount)

    def mint(self, asset: AssetId, dest: Owner, amount: Amount) -> None:
        self._check(InstructionKind.MINT, asset, amount)
        self.balances.credit(dest, asset, amount)

    def burn(self, asset: AssetId, source: Owner, amount: Amount) -> None:
        self._check(InstructionKind.BURN, asset, amount)
        if self.balances.get(source, asset) < amount:
            raise LedgerError(
                f"insufficient {asset} balance for {source}: {self.balances.get(source, asset)} < {amount}"
            )
        self.balances.debit(source, asset, amount)

    def balance_of(self, owner: Owner, asset: AssetId) -> Amount:
        return self.balances.get(owner, asset)

    def fund(self, entries: Iterable[Tuple[Owner, AssetId, Amount]]) -> None:
        """Credit balances directly (test/demo setup)."""
        for owner, asset, amount in entries:
            self.balances.credit(owner, asset, amount)

    def __repr__(self) -> str:
        return f"InMemoryLedger({self.balances!r})"
