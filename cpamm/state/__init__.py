"""
State management: pool records, balances, and the token ledger collaborator.
"""

from .balances import BalanceTable
from .ledger import InMemoryLedger, InstructionKind, LedgerInstruction, TokenLedger, execute_instructions
from .pools import PoolConfig, PoolRecord, PoolRegistry, PoolState, PoolStatus, SwapDirection

__all__ = [
    "BalanceTable",
    "InMemoryLedger",
    "InstructionKind",
    "LedgerInstruction",
    "TokenLedger",
    "execute_instructions",
    "PoolConfig",
    "PoolRecord",
    "PoolRegistry",
    "PoolState",
    "PoolStatus",
    "SwapDirection",
]
