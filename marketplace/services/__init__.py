"""
Módulo de servicios de marketplace.

Exporta los servicios del pipeline de inventario.
"""
from .alerts import StockAlertService
from .back_in_stock import BackInStockService
from .low_stock import AutoReorderService, LowStockService
from .purchase_orders import PurchaseOrderReceiptService
from .stock_recovery import StockRecoveryService
from .subscriptions import StockSubscriptionService

__all__ = [
    'StockAlertService',
    'BackInStockService',
    'AutoReorderService',
    'LowStockService',
    'PurchaseOrderReceiptService',
    'StockRecoveryService',
    'StockSubscriptionService',
]
