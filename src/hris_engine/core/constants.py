"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

MINUTES_PER_DAY = 24 * 60

DEFAULT_ANNUAL_QUOTA = 12
CARRY_FORWARD_EXPIRY_MONTHS = 6

# Upper bound for department parent walks (guards against cyclic data).
MAX_CHAIN_DEPTH = 32

CURRENCY_DECIMAL_PLACES = 2
ZERO_AMOUNT = Decimal("0")
