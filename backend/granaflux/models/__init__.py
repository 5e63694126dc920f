from .tenancy import Company
from .auth import User, SessionToken
from .ledger import Category, Revenue, Expense
from .inventory import Product, StockMovement
from .customers import Client
from .sales import Sale, SaleItem, Commission, CommissionRate
from .tasks import Task

__all__ = [
    'Company',
    'User', 'SessionToken',
    'Category', 'Revenue', 'Expense',
    'Product', 'StockMovement',
    'Client',
    'Sale', 'SaleItem', 'Commission', 'CommissionRate',
    'Task',
]
