"""Ledger entry vocabularies."""

from enum import Enum


class TransactionType(str, Enum):
    """Kinds of monetary events recorded against a booking."""

    DEPOSIT = "DEPOSIT"  # Đặt cọc
    PAYMENT = "PAYMENT"  # Thanh toán
    COMMISSION = "COMMISSION"  # Hoa hồng
    REFUND = "REFUND"  # Hoàn tiền


class TransactionStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CARD = "CARD"
    OTHER = "OTHER"

