"""Benefit ledger package."""

from wic_assistant.ledger.ledger import BenefitLedger
from wic_assistant.ledger.persistence import DocumentWriter

__all__ = ["BenefitLedger", "DocumentWriter"]
