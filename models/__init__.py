# Models package - Import all models for Flask-SQLAlchemy

from models.currencies import Currency
from models.expenses import Expense
from models.family import FamilyLink, FamilyMemberRequest
from models.users import User

__all__ = [
    'Currency',
    'Expense',
    'FamilyLink',
    'FamilyMemberRequest',
    'User',
]
