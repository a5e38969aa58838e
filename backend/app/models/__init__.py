"""
Aggregate export for all SQLModel table classes.

Having each model re‑exported here guarantees that
`import app.models` will register every table in
`SQLModel.metadata`, so Alembic and ``create_all`` can discover them.
"""

# --- Product master --------------------------------------------------------
from .product import Product  # noqa: F401

# --- Stock-count requests --------------------------------------------------
from .stock_request import StockRequest, StockRequestStatus  # noqa: F401

# --- Overflow ledger -------------------------------------------------------
from .overflow import OverflowEvent, OverflowReason, REASON_LABELS  # noqa: F401

# --- QR scans --------------------------------------------------------------
from .qr_code import QRCode  # noqa: F401

# --- Sessions --------------------------------------------------------------
from .user_session import UserSession  # noqa: F401

__all__ = [
    "Product",
    "StockRequest",
    "StockRequestStatus",
    "OverflowEvent",
    "OverflowReason",
    "REASON_LABELS",
    "QRCode",
    "UserSession",
]
