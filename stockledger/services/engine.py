"""
Stock ledger engine.

The five operations the HTTP layer (or any other caller) drives. Each one
takes an explicit Session and runs as a single unit of work; the stock
logic itself lives in the modules imported below.
"""

from stockledger.services.identity import create_stocking
from stockledger.services.ledger import record_movement, reverse_movement
from stockledger.services.pricing import bulk_adjust_prices
from stockledger.services.transfer import transfer_stock

__all__ = [
    "create_stocking",
    "record_movement",
    "reverse_movement",
    "transfer_stock",
    "bulk_adjust_prices",
]
