from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, ConflictError, NotFoundError
from packworkx.db.base import STATUS_ACTIVE, STATUS_INACTIVE
from packworkx.db.models.grn import GRN, GRNItem
from packworkx.db.models.inventory import Inventory
from packworkx.db.models.procurement import PurchaseOrder, PurchaseOrderItem
from packworkx.repositories.grn import GRNRepository
from packworkx.repositories.inventory import InventoryRepository, StockAdjustmentRepository
from packworkx.repositories.procurement import PurchaseOrderRepository
from packworkx.schemas.grn import GRNCreate, GRNItemIn, GRNUpdate
from packworkx.services.base import CompanyService, qty
from packworkx.services.id_generator import generate_id
from packworkx.services.purchase_orders import RECEIPT_FULL, RECEIPT_PARTIAL, PurchaseOrderService

logger = logging.getLogger(__name__)


class GRNService(CompanyService):
    """
    Goods received notes.

    Every GRN is reconciled against its purchase order: the accepted quantity of a
    PO line summed over all active GRNs never exceeds the ordered quantity.
    Accepted goods are posted to inventory, one stock row per GRN line.
    """

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = GRNRepository(session, company_id)
        self.pos = PurchaseOrderRepository(session, company_id)
        self.inventory = InventoryRepository(session, company_id)
        self.adjustments = StockAdjustmentRepository(session, company_id)
        self.po_service = PurchaseOrderService(session, company_id, user_id)

    async def list_grns(self, **filters) -> List[GRN]:
        return await self.repo.list_grns(**filters)

    async def get_grn(self, grn_id: UUID) -> GRN:
        grn = await self.repo.get(grn_id)
        if grn is None:
            raise NotFoundError("GRN not found")
        return grn

    async def list_for_purchase_order(self, po_id: UUID, *, status: Optional[str] = None) -> List[GRN]:
        await self.po_service.get_purchase_order(po_id)
        return await self.repo.list_grns(search=None, po_id=po_id, status=status, limit=1000, offset=0)

    async def _receivable_po(self, po_id: UUID) -> PurchaseOrder:
        po = await self.pos.get(po_id, for_update=True)
        if po is None or po.status != STATUS_ACTIVE:
            raise BusinessRuleError("Purchase order not found or inactive", details={"po_id": str(po_id)})
        if po.decision != "approve":
            raise BusinessRuleError("Purchase order is not approved", details={"decision": po.decision})
        return po

    def _build_items(
        self,
        po: PurchaseOrder,
        items_in: List[GRNItemIn],
        accepted_before: Dict[UUID, Decimal],
    ) -> List[GRNItem]:
        """Validate lines against the PO and the over-receipt rule, returning unsaved GRN lines."""
        po_lines: Dict[UUID, PurchaseOrderItem] = {line.id: line for line in po.items}
        this_grn: Dict[UUID, Decimal] = defaultdict(Decimal)
        rows: List[GRNItem] = []

        for idx, line in enumerate(items_in, start=1):
            po_line = po_lines.get(line.po_item_id)
            if po_line is None:
                raise BusinessRuleError(
                    "Item does not belong to the purchase order",
                    details={"line": idx, "po_item_id": str(line.po_item_id)},
                )
            received = qty(line.quantity_received)
            accepted = qty(line.accepted_quantity)
            rejected = qty(line.rejected_quantity) if line.rejected_quantity is not None else received - accepted
            if rejected < 0 or accepted + rejected != received:
                raise BusinessRuleError(
                    "Accepted and rejected quantities must add up to the received quantity",
                    details={
                        "line": idx,
                        "quantity_received": float(received),
                        "accepted_quantity": float(accepted),
                        "rejected_quantity": float(rejected),
                    },
                )
            this_grn[po_line.id] += accepted
            rows.append(
                GRNItem(
                    company_id=self.company_id,
                    line_no=idx,
                    po_item_id=po_line.id,
                    item_id=po_line.item_id,
                    quantity_ordered=qty(po_line.quantity),
                    quantity_received=received,
                    accepted_quantity=accepted,
                    rejected_quantity=rejected,
                    batch_no=line.batch_no,
                    location=line.location,
                    notes=line.notes,
                )
            )

        for po_item_id, accepted in this_grn.items():
            po_line = po_lines[po_item_id]
            ordered = qty(po_line.quantity)
            already = accepted_before.get(po_item_id, Decimal(0))
            if already + accepted > ordered:
                logger.warning(
                    "Over-receipt on %s line %s: ordered=%s already=%s accepting=%s",
                    po.purchase_generate_id, po_line.line_no, ordered, already, accepted,
                )
                raise ConflictError(
                    "Accepted quantity exceeds the quantity ordered",
                    details={
                        "po_item_id": str(po_item_id),
                        "item_code": po_line.item_code,
                        "quantity_ordered": float(ordered),
                        "already_accepted": float(already),
                        "accepting": float(accepted),
                        "remaining": float(ordered - already),
                    },
                )
        return rows

    async def _post_stock(self, grn: GRN, po: PurchaseOrder) -> List[Inventory]:
        """Create one inventory row per accepted GRN line."""
        po_lines = {line.id: line for line in po.items}
        posted = []
        for line in grn.items:
            if line.accepted_quantity <= 0:
                continue
            po_line = po_lines[line.po_item_id]
            row = Inventory(
                company_id=self.company_id,
                inventory_generate_id=await generate_id(self.session, self.company_id, "inventory"),
                item_id=line.item_id,
                item_code=po_line.item_code,
                grn_id=grn.id,
                grn_item_id=line.id,
                po_id=po.id,
                description=f"{grn.grn_generate_id} / {po_line.item_name or po_line.item_code}",
                quantity_available=line.accepted_quantity,
                posted_quantity=line.accepted_quantity,
                batch_no=line.batch_no,
                location=line.location,
                created_by=self.user_id,
                updated_by=self.user_id,
            )
            await self.inventory.add(row)
            posted.append(row)
        await self.inventory.flush()
        return posted

    async def _release_stock(self, grn: GRN) -> None:
        """
        Deactivate the stock rows posted by a GRN.

        A posted row that was deactivated outside the GRN still counts as moved;
        re-posting it would resurrect stock that was written off.

        Raises:
            ConflictError: posted stock has been consumed, adjusted or removed since posting.
        """
        rows = await self.inventory.list_for_grn(grn.id, for_update=True, include_inactive=True)
        current_lines = {line.id for line in grn.items}
        active = [r for r in rows if r.status == STATUS_ACTIVE]
        moved = [r for r in active if qty(r.quantity_available) != qty(r.posted_quantity)]
        moved += [r for r in rows if r.status != STATUS_ACTIVE and r.grn_item_id in current_lines]
        if moved or await self.adjustments.count_active_for_inventory([r.id for r in active]):
            logger.warning("GRN %s stock already moved; refusing change", grn.grn_generate_id)
            raise ConflictError(
                "Stock posted by this GRN has already been consumed or adjusted",
                details={"inventory_ids": [str(r.id) for r in moved]},
            )
        for row in active:
            row.status = STATUS_INACTIVE
            row.updated_by = self.user_id
        await self.inventory.flush()

    async def _refresh_statuses(self, grn: GRN, po: PurchaseOrder) -> None:
        receipt = await self.po_service.refresh_receipt_status(po)
        grn.grn_status = RECEIPT_FULL if receipt == RECEIPT_FULL else RECEIPT_PARTIAL
        po.updated_by = self.user_id

    # PUBLIC_INTERFACE
    async def create_grn(self, payload: GRNCreate) -> GRN:
        """
        Receive goods against an approved purchase order.

        Parameters:
            payload: GRNCreate request
        Returns:
            The created GRN with its lines.
        Raises:
            BusinessRuleError: PO missing/inactive/unapproved, foreign PO lines, inconsistent quantities.
            ConflictError: cumulative accepted quantity would exceed the ordered quantity.
        """
        async with self._transaction():
            po = await self._receivable_po(payload.po_id)
            accepted_before = await self.pos.accepted_by_po_item(po.id)
            items = self._build_items(po, payload.items, accepted_before)
            grn = GRN(
                company_id=self.company_id,
                grn_generate_id=await generate_id(self.session, self.company_id, "grn"),
                po_id=po.id,
                supplier_id=po.supplier_id,
                grn_date=payload.grn_date or date.today(),
                invoice_no=payload.invoice_no,
                invoice_date=payload.invoice_date,
                received_by=payload.received_by,
                remarks=payload.remarks,
                created_by=self.user_id,
                updated_by=self.user_id,
                items=items,
            )
            await self.repo.add(grn)
            await self.repo.flush()
            await self._post_stock(grn, po)
            await self._refresh_statuses(grn, po)
            await self.repo.flush()
        logger.info(
            "Posted GRN %s against %s (%d lines, PO now %s)",
            grn.grn_generate_id, po.purchase_generate_id, len(grn.items), po.receipt_status,
        )
        return grn

    async def update_grn(self, grn_id: UUID, payload: GRNUpdate) -> GRN:
        """Replace a GRN's lines; its own previous lines are left out of the over-receipt sum."""
        async with self._transaction():
            grn = await self.repo.get_active(grn_id, for_update=True)
            if grn is None:
                raise NotFoundError("GRN not found")
            po = await self._receivable_po(grn.po_id)
            await self._release_stock(grn)
            accepted_before = await self.pos.accepted_by_po_item(po.id, exclude_grn_id=grn.id)
            items = self._build_items(po, payload.items, accepted_before)

            grn.items = items
            grn.grn_date = payload.grn_date
            grn.invoice_no = payload.invoice_no
            grn.invoice_date = payload.invoice_date
            grn.received_by = payload.received_by
            grn.remarks = payload.remarks
            grn.updated_by = self.user_id
            await self.repo.flush()
            await self._post_stock(grn, po)
            await self._refresh_statuses(grn, po)
            await self.repo.flush()
        logger.info("Updated GRN %s (PO now %s)", grn.grn_generate_id, po.receipt_status)
        return grn

    async def delete_grn(self, grn_id: UUID) -> None:
        async with self._transaction():
            grn = await self.repo.get_active(grn_id, for_update=True)
            if grn is None:
                raise NotFoundError("GRN not found")
            await self._release_stock(grn)
            grn.status = STATUS_INACTIVE
            grn.updated_by = self.user_id
            po = await self.po_service.get_purchase_order(grn.po_id, for_update=True)
            await self.po_service.refresh_receipt_status(po)
            po.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Cancelled GRN %s (PO now %s)", grn.grn_generate_id, po.receipt_status)
