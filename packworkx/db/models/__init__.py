"""
ORM models for companies, clients, procurement, goods receipt, inventory,
purchase returns, SKUs, work orders, invoicing, credit/debit notes and machines.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .company import (  # noqa: F401
    Company,
    InvoiceSetting,
    IdSequence,
)
from .security import (  # noqa: F401
    User,
    Role,
    UserRole,
)
from .clients import (  # noqa: F401
    Client,
    WalletHistory,
)
from .items import Item  # noqa: F401
from .procurement import (  # noqa: F401
    PurchaseOrder,
    PurchaseOrderItem,
    PurchaseOrderPayment,
)
from .grn import (  # noqa: F401
    GRN,
    GRNItem,
)
from .returns import (  # noqa: F401
    PurchaseReturn,
    PurchaseReturnItem,
)
from .inventory import (  # noqa: F401
    Inventory,
    StockAdjustment,
    StockAdjustmentItem,
)
from .sales import (  # noqa: F401
    WorkOrderInvoice,
    PartialPayment,
    Sku,
    WorkOrder,
)
from .notes import (  # noqa: F401
    CreditNote,
    DebitNote,
)
from .machines import (  # noqa: F401
    Machine,
    ProcessName,
    ProcessField,
)
