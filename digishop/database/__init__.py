from .database import Database, Transaction

__all__ = ['Database', 'Transaction']
