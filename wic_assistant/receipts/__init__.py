"""Receipt parsing package."""

from wic_assistant.receipts.parser import ReceiptScan, extract_upcs, find_upc_codes

__all__ = ["ReceiptScan", "extract_upcs", "find_upc_codes"]
