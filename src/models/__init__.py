# Import all models here to ensure they are registered on the metadata

from src.models.base import Base

from src.models.credit_account import CreditAccount
from src.models.warning_state import WarningState

__all__ = [
    "Base",
    "CreditAccount",
    "WarningState",
]
