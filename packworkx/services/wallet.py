from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from packworkx.core.errors import ConflictError
from packworkx.db.models.clients import Client, WalletHistory
from packworkx.services.base import CompanyService, money

logger = logging.getLogger(__name__)

CREDIT_WALLET = "credit"
DEBIT_WALLET = "debit"

_BALANCE_ATTR = {
    CREDIT_WALLET: "credit_balance",
    DEBIT_WALLET: "debit_balance",
}


class WalletService(CompanyService):
    """
    Moves money in and out of a client's two wallets.

    The credit wallet holds customer credit (credit notes, reversed invoice
    credits); the debit wallet holds supplier credit (debit notes). Neither may go
    below zero and every movement is journaled. Callers run inside their own
    transaction; nothing here commits.
    """

    async def add(self, client: Client, wallet: str, amount: Decimal, reference: Optional[str]) -> Decimal:
        """Add `amount` to the given wallet and return the new balance."""
        return await self._move(client, wallet, "credit", money(amount), reference)

    async def remove(self, client: Client, wallet: str, amount: Decimal, reference: Optional[str]) -> Decimal:
        """
        Take `amount` out of the given wallet.

        Raises:
            ConflictError: if the balance would go negative.
        """
        return await self._move(client, wallet, "debit", money(amount), reference)

    async def _move(self, client: Client, wallet: str, direction: str, amount: Decimal, reference: Optional[str]) -> Decimal:
        attr = _BALANCE_ATTR[wallet]
        current = money(getattr(client, attr))
        if amount == 0:
            return current
        new_balance = current + amount if direction == "credit" else current - amount
        if new_balance < 0:
            logger.warning(
                "Wallet %s of client %s would go negative (balance %s, debit %s)",
                wallet, client.id, current, amount,
            )
            raise ConflictError(
                f"Insufficient {wallet} balance",
                details={"client_id": str(client.id), "balance": float(current), "requested": float(amount)},
            )
        setattr(client, attr, new_balance)
        client.updated_by = self.user_id
        self.session.add(
            WalletHistory(
                company_id=self.company_id,
                client_id=client.id,
                wallet=wallet,
                type=direction,
                amount=amount,
                balance_after=new_balance,
                reference_number=reference,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
        )
        await self.session.flush()
        logger.info("Wallet %s of client %s %sed by %s -> %s", wallet, client.id, direction, amount, new_balance)
        return new_balance
