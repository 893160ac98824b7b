from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_ACTIVE, STATUS_INACTIVE
from packworkx.db.models.grn import GRN
from packworkx.db.models.returns import PurchaseReturn, PurchaseReturnItem
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.grn import GRNRepository
from packworkx.repositories.inventory import InventoryRepository
from packworkx.repositories.procurement import PurchaseOrderRepository
from packworkx.repositories.returns import PurchaseReturnRepository
from packworkx.schemas.returns import PurchaseReturnCreate
from packworkx.services.base import CompanyService, money, qty
from packworkx.services.id_generator import generate_id
from packworkx.services.purchase_orders import line_amounts
from packworkx.services.wallet import DEBIT_WALLET, WalletService

logger = logging.getLogger(__name__)


def _reference(purchase_return: PurchaseReturn) -> str:
    return f"Purchase Order Return {purchase_return.purchase_return_generate_id}"


class PurchaseReturnService(CompanyService):
    """
    Goods sent back to a supplier after they were accepted on a GRN.

    A GRN line can give back at most its accepted quantity, summed over all
    active returns. Each return takes the goods out of the stock row the GRN
    posted and credits the supplier's debit wallet with the value at the PO
    rate. Cancelling a return puts both back.
    """

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = PurchaseReturnRepository(session, company_id)
        self.grns = GRNRepository(session, company_id)
        self.pos = PurchaseOrderRepository(session, company_id)
        self.inventory = InventoryRepository(session, company_id)
        self.clients = ClientRepository(session, company_id)
        self.wallet = WalletService(session, company_id, user_id)

    async def list_returns(self, **filters) -> List[PurchaseReturn]:
        return await self.repo.list_returns(**filters)

    async def get_return(self, return_id: UUID) -> PurchaseReturn:
        purchase_return = await self.repo.get(return_id)
        if purchase_return is None:
            raise NotFoundError("Purchase return not found")
        return purchase_return

    async def _returnable_grn(self, grn_id: UUID) -> GRN:
        grn = await self.grns.get_active(grn_id, for_update=True)
        if grn is None:
            raise BusinessRuleError("GRN not found or cancelled", details={"grn_id": str(grn_id)})
        return grn

    # PUBLIC_INTERFACE
    async def create_return(self, payload: PurchaseReturnCreate) -> PurchaseReturn:
        """
        Return accepted goods of a GRN to the supplier.

        Parameters:
            payload: PurchaseReturnCreate request
        Returns:
            The created return with its priced lines.
        Raises:
            BusinessRuleError: GRN missing or cancelled, or a line not on the GRN.
            ConflictError: returning more than was accepted, or more than is still in stock.
        """
        async with self._transaction():
            grn = await self._returnable_grn(payload.grn_id)
            po = await self.pos.get(grn.po_id, for_update=True)
            grn_lines = {line.id: line for line in grn.items}
            po_lines = {line.id: line for line in po.items}
            already = await self.repo.returned_by_grn_item(grn.id)
            returning: Dict[UUID, Decimal] = defaultdict(Decimal)

            purchase_return = PurchaseReturn(
                company_id=self.company_id,
                purchase_return_generate_id=await generate_id(self.session, self.company_id, "purchase_return"),
                grn_id=grn.id,
                po_id=po.id,
                supplier_id=po.supplier_id,
                return_date=payload.return_date or date.today(),
                reason=payload.reason,
                notes=payload.notes,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            totals = defaultdict(Decimal)
            for idx, line in enumerate(payload.items, start=1):
                grn_line = grn_lines.get(line.grn_item_id)
                if grn_line is None:
                    raise BusinessRuleError(
                        "Item does not belong to the GRN",
                        details={"line": idx, "grn_item_id": str(line.grn_item_id)},
                    )
                quantity = qty(line.return_qty)
                returning[grn_line.id] += quantity
                accepted = qty(grn_line.accepted_quantity)
                previous = already.get(grn_line.id, Decimal(0))
                if previous + returning[grn_line.id] > accepted:
                    logger.warning(
                        "Over-return on %s line %s: accepted=%s returned=%s returning=%s",
                        grn.grn_generate_id, grn_line.line_no, accepted, previous, returning[grn_line.id],
                    )
                    raise ConflictError(
                        "Returned quantity exceeds the accepted quantity",
                        details={
                            "line": idx,
                            "grn_item_id": str(grn_line.id),
                            "accepted_quantity": float(accepted),
                            "already_returned": float(previous),
                            "returnable": float(accepted - previous),
                        },
                    )

                stock = await self.inventory.get_for_grn_item(grn_line.id, for_update=True)
                if stock is None or qty(stock.quantity_available) < quantity:
                    raise ConflictError(
                        "Returned goods are no longer in stock",
                        details={
                            "line": idx,
                            "available": float(stock.quantity_available) if stock is not None else 0.0,
                            "requested": float(quantity),
                        },
                    )
                stock.quantity_available = qty(stock.quantity_available) - quantity
                stock.updated_by = self.user_id

                po_line = po_lines[grn_line.po_item_id]
                amount, tax, total = line_amounts(quantity, po_line.unit_price, po_line.cgst, po_line.sgst)
                cgst_amount = money(amount * money(po_line.cgst) / 100)
                purchase_return.items.append(
                    PurchaseReturnItem(
                        company_id=self.company_id,
                        line_no=idx,
                        grn_item_id=grn_line.id,
                        po_item_id=po_line.id,
                        item_id=grn_line.item_id,
                        inventory_id=stock.id,
                        return_qty=quantity,
                        unit_price=money(po_line.unit_price),
                        cgst=po_line.cgst,
                        sgst=po_line.sgst,
                        cgst_amount=cgst_amount,
                        sgst_amount=tax - cgst_amount,
                        amount=amount,
                        tax_amount=tax,
                        total_amount=total,
                        reason=line.reason,
                        notes=line.notes,
                    )
                )
                totals["total_qty"] += quantity
                totals["amount"] += amount
                totals["cgst_amount"] += cgst_amount
                totals["sgst_amount"] += tax - cgst_amount
                totals["tax_amount"] += tax
                totals["total_amount"] += total

            for key, value in totals.items():
                setattr(purchase_return, key, value)
            await self.repo.add(purchase_return)

            supplier = await self.clients.get(po.supplier_id, for_update=True)
            await self.wallet.add(supplier, DEBIT_WALLET, purchase_return.total_amount, _reference(purchase_return))
            await self.repo.flush()
        logger.info(
            "Returned %s units on %s to supplier %s for %s",
            purchase_return.total_qty, grn.grn_generate_id, po.supplier_id, purchase_return.total_amount,
        )
        return purchase_return

    async def delete_return(self, return_id: UUID) -> None:
        """Cancel a return: goods go back into stock and the supplier credit is withdrawn."""
        async with self._transaction():
            purchase_return = await self.repo.get_active(return_id, for_update=True)
            if purchase_return is None:
                raise NotFoundError("Purchase return not found")
            for line in purchase_return.items:
                stock = await self.inventory.get(line.inventory_id, for_update=True) if line.inventory_id else None
                if stock is None or stock.status != STATUS_ACTIVE:
                    raise ConflictError(
                        "Stock row of the returned goods is no longer active",
                        details={"line": line.line_no},
                    )
                stock.quantity_available = qty(stock.quantity_available) + qty(line.return_qty)
                stock.updated_by = self.user_id
            supplier = await self.clients.get(purchase_return.supplier_id, for_update=True)
            await self.wallet.remove(
                supplier, DEBIT_WALLET, purchase_return.total_amount, _reference(purchase_return)
            )
            purchase_return.status = STATUS_INACTIVE
            purchase_return.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Cancelled purchase return %s", purchase_return.purchase_return_generate_id)
