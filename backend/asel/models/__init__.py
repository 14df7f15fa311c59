from .inventory import Product, PurchaseInvoice, PurchaseInvoiceItem
from .sales import SalesInvoice, SalesInvoiceItem, OperatingExpense
from .documents import SequenceCounter

__all__ = [
    'Product', 'PurchaseInvoice', 'PurchaseInvoiceItem',
    'SalesInvoice', 'SalesInvoiceItem', 'OperatingExpense',
    'SequenceCounter',
]
