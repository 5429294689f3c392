from .catalog import Product, ProductVariant, ReorderStatus
from .purchasing import LowStockAlert, PurchaseOrder, Supplier
from .subscriptions import StockNotificationSubscription

__all__ = [
    "ReorderStatus",
    "Product",
    "ProductVariant",
    "Supplier",
    "PurchaseOrder",
    "LowStockAlert",
    "StockNotificationSubscription",
]
