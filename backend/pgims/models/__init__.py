from .stores import Store
from .inventory import Product, InventoryRecord
from .orders import Order, OrderLine
from .requisitions import StockRequisition, RequisitionItem
from .customers import Customer
from .finance import BankAccount, Transaction
from .purchasing import Supplier, PurchaseOrder
from .notifications import Notification
from .auth import User, SessionToken

__all__ = [
    'Store',
    'Product', 'InventoryRecord',
    'Order', 'OrderLine',
    'StockRequisition', 'RequisitionItem',
    'Customer',
    'BankAccount', 'Transaction',
    'Supplier', 'PurchaseOrder',
    'Notification',
    'User', 'SessionToken',
]
