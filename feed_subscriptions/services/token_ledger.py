"""Value-transfer ledger for the fungible token backing subscriptions.

Responsibilities:
- Hold token balances per address
- Mint (control API only), transfer and burn units
- Snapshot/restore so a failed call leaves no partial transfers behind
"""

import threading
from typing import Dict, Optional

from feed_subscriptions.logging_config import get_logger

logger = get_logger(__name__)


class LedgerError(Exception):
    """Base exception for ledger failures."""

    pass


class InvalidTransferError(LedgerError):
    """Raised for negative amounts or malformed transfers."""

    pass


class InsufficientBalanceError(LedgerError):
    """Raised when the source address cannot cover the amount."""

    pass


class InMemoryTokenLedger:
    """In-process fungible token ledger.

    Thread-safe through an internal lock. All amounts are integers in the
    smallest token unit.

    Args:
        token: Token reference (contract address) this ledger represents
    """

    def __init__(self, token: Optional[str] = None):
        self.token = token
        self._balances: Dict[str, int] = {}
        self._total_supply = 0
        self._burned = 0
        self._lock = threading.RLock()

    def _check_amount(self, amount: int) -> None:
        if not isinstance(amount, int) or amount < 0:
            raise InvalidTransferError(f"Amount must be a non-negative integer, got {amount!r}")

    def balance(self, address: str) -> int:
        """Get balance of an address (0 for unknown addresses)."""
        with self._lock:
            return self._balances.get(address, 0)

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self._total_supply

    @property
    def total_burned(self) -> int:
        with self._lock:
            return self._burned

    def mint(self, to: str, amount: int) -> int:
        """Create new units for an address.

        Returns:
            New balance of ``to``
        """
        self._check_amount(amount)
        with self._lock:
            self._balances[to] = self._balances.get(to, 0) + amount
            self._total_supply += amount
            new_balance = self._balances[to]

        logger.info("tokens_minted", to_address=to, amount=amount, balance=new_balance)
        return new_balance

    def transfer(self, from_address: str, to_address: str, amount: int) -> None:
        """Move units between addresses.

        Raises:
            InvalidTransferError: If amount is negative
            InsufficientBalanceError: If from_address cannot cover amount
        """
        self._check_amount(amount)
        with self._lock:
            available = self._balances.get(from_address, 0)
            if available < amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance: {from_address} has {available}, needs {amount}"
                )
            self._balances[from_address] = available - amount
            self._balances[to_address] = self._balances.get(to_address, 0) + amount

        logger.debug(
            "tokens_transferred",
            from_address=from_address,
            to_address=to_address,
            amount=amount,
        )

    def burn(self, holder: str, amount: int) -> None:
        """Destroy units held by an address.

        Raises:
            InvalidTransferError: If amount is negative
            InsufficientBalanceError: If holder cannot cover amount
        """
        self._check_amount(amount)
        with self._lock:
            available = self._balances.get(holder, 0)
            if available < amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance to burn: {holder} has {available}, needs {amount}"
                )
            self._balances[holder] = available - amount
            self._total_supply -= amount
            self._burned += amount

        logger.debug("tokens_burned", holder=holder, amount=amount)

    def snapshot(self) -> tuple:
        with self._lock:
            return dict(self._balances), self._total_supply, self._burned

    def restore(self, snapshot: tuple) -> None:
        with self._lock:
            balances, total_supply, burned = snapshot
            self._balances = dict(balances)
            self._total_supply = total_supply
            self._burned = burned

    def clear(self) -> None:
        """Drop all balances."""
        with self._lock:
            self._balances.clear()
            self._total_supply = 0
            self._burned = 0

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "holders": sum(1 for b in self._balances.values() if b > 0),
                "total_supply": self._total_supply,
                "total_burned": self._burned,
            }
