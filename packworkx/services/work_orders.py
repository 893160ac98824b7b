from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from packworkx.core.errors import BusinessRuleError, NotFoundError
from packworkx.db.base import STATUS_INACTIVE
from packworkx.db.models.sales import Sku, WorkOrder
from packworkx.repositories.clients import ClientRepository
from packworkx.repositories.sales import SkuRepository, WorkOrderRepository
from packworkx.schemas.work_orders import WorkOrderCreate, WorkOrderUpdate
from packworkx.services.base import CompanyService, qty
from packworkx.services.id_generator import generate_id

logger = logging.getLogger(__name__)


def check_schedule(
    manufacture: str,
    outsource_name: Optional[str],
    planned_start: Optional[date],
    planned_end: Optional[date],
) -> None:
    """
    Validate the manufacturing mode and planned window of a work order.

    Raises:
        BusinessRuleError: outsourced without a vendor, or a window ending before it starts.
    """
    if manufacture == "outsource" and not (outsource_name or "").strip():
        raise BusinessRuleError("Outsourced work orders need an outsource name")
    if planned_start and planned_end and planned_end < planned_start:
        raise BusinessRuleError(
            "Planned end date is before the planned start date",
            details={"planned_start_date": planned_start.isoformat(), "planned_end_date": planned_end.isoformat()},
        )


class WorkOrderService(CompanyService):
    """Work orders: what is produced for whom, how, and when."""

    def __init__(self, session, company_id: UUID, user_id: Optional[UUID] = None) -> None:
        super().__init__(session, company_id, user_id)
        self.repo = WorkOrderRepository(session, company_id)
        self.skus = SkuRepository(session, company_id)
        self.clients = ClientRepository(session, company_id)

    async def list_work_orders(self, **filters) -> List[WorkOrder]:
        return await self.repo.list_work_orders(**filters)

    async def get_work_order(self, work_order_id: UUID) -> WorkOrder:
        work_order = await self.repo.get(work_order_id)
        if work_order is None:
            raise NotFoundError("Work order not found")
        return work_order

    async def _sku_for(self, sku_id: UUID, client_id: UUID) -> Sku:
        sku = await self.skus.get_active(sku_id)
        if sku is None or sku.client_id != client_id:
            raise BusinessRuleError("SKU not found for this client", details={"sku_id": str(sku_id)})
        return sku

    # PUBLIC_INTERFACE
    async def create_work_order(self, payload: WorkOrderCreate) -> WorkOrder:
        """
        Open a work order for an active client.

        Raises:
            BusinessRuleError: client or SKU missing, outsourced without a vendor, bad planned window.
        """
        check_schedule(payload.manufacture, payload.outsource_name, payload.planned_start_date, payload.planned_end_date)
        async with self._transaction():
            client = await self.clients.get_active(payload.client_id)
            if client is None:
                raise BusinessRuleError("Client not found or inactive", details={"client_id": str(payload.client_id)})
            sku_name = payload.sku_name
            if payload.sku_id is not None:
                sku = await self._sku_for(payload.sku_id, client.id)
                sku_name = sku_name or sku.sku_name
            data = payload.model_dump(exclude={"sku_name", "quantity"})
            if payload.manufacture != "outsource":
                data["outsource_name"] = None
            work_order = WorkOrder(
                company_id=self.company_id,
                work_order_generate_id=await generate_id(self.session, self.company_id, "work_order"),
                sku_name=sku_name,
                quantity=qty(payload.quantity),
                created_by=self.user_id,
                updated_by=self.user_id,
                **data,
            )
            await self.repo.add(work_order)
            await self.repo.flush()
        logger.info("Opened work order %s for client %s", work_order.work_order_generate_id, client.id)
        return work_order

    async def update_work_order(self, work_order_id: UUID, payload: WorkOrderUpdate) -> WorkOrder:
        async with self._transaction():
            work_order = await self.repo.get_active(work_order_id, for_update=True)
            if work_order is None:
                raise NotFoundError("Work order not found")
            values = payload.model_dump(exclude_unset=True)
            if values.get("sku_id") is not None:
                sku = await self._sku_for(values["sku_id"], work_order.client_id)
                if "sku_name" not in values:
                    values["sku_name"] = sku.sku_name
            if values.get("quantity") is not None:
                values["quantity"] = qty(values["quantity"])
            for key, value in values.items():
                if value is None and key in ("manufacture", "quantity", "acceptable_excess_units", "stage"):
                    continue
                setattr(work_order, key, value)
            check_schedule(
                work_order.manufacture,
                work_order.outsource_name,
                work_order.planned_start_date,
                work_order.planned_end_date,
            )
            if work_order.manufacture != "outsource":
                work_order.outsource_name = None
            work_order.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Updated work order %s (stage %s)", work_order.work_order_generate_id, work_order.stage)
        return work_order

    async def delete_work_order(self, work_order_id: UUID) -> None:
        async with self._transaction():
            work_order = await self.repo.get_active(work_order_id, for_update=True)
            if work_order is None:
                raise NotFoundError("Work order not found")
            work_order.status = STATUS_INACTIVE
            work_order.updated_by = self.user_id
            await self.repo.flush()
        logger.info("Cancelled work order %s", work_order.work_order_generate_id)
