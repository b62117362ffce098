"""
Receipt text parsing.

OCR itself happens outside this package; we only receive the
recognized text and pick out the UPCs printed on it.
"""

import re
from functools import lru_cache

from pydantic import BaseModel, Field

from wic_assistant.models.catalog import Product


@lru_cache(maxsize=8)
def _upc_pattern(length: int) -> re.Pattern:
    return re.compile(rf"\b\d{{{length}}}\b")


def find_upc_codes(text: str, length: int = 12) -> list[str]:
    """Every standalone run of exactly `length` digits, duplicates included."""
    return _upc_pattern(length).findall(text or "")


def extract_upcs(text: str, length: int = 12) -> list[str]:
    """Unique UPCs in first-seen order."""
    return list(dict.fromkeys(find_upc_codes(text, length)))


class ReceiptScan(BaseModel):
    """Result of matching a receipt's UPCs against the APL."""

    codes_found: int = Field(
        default=0,
        ge=0,
        description="Number of UPC-shaped codes on the receipt, duplicates included"
    )
    products: list[Product] = Field(
        default_factory=list,
        description="Unique codes found in the APL, in receipt order"
    )

    @property
    def status(self) -> str:
        if self.codes_found == 0:
            return "No UPCs found."
        return f"Found {self.codes_found} codes, {len(self.products)} valid WIC items."
