from .store import KeyValueEntry
from .entities import User, Product, Transaction, TransactionType

__all__ = [
    'KeyValueEntry',
    'User', 'Product', 'Transaction', 'TransactionType',
]
