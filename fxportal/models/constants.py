"""Payment form and history constants.

Amount limits mirror the upstream service; the form rejects out-of-range
values before a request is made.
"""

from decimal import Decimal

MAX_AMOUNT: Decimal = Decimal("1000000")
DEFAULT_MIN_AMOUNT: Decimal = Decimal("0.01")
DEFAULT_DECIMALS: int = 2
MIN_RECIPIENT_LENGTH: int = 2
MAX_RECIPIENT_LENGTH: int = 140
DEFAULT_PAGE_SIZE: int = 20
MAX_VISIBLE_PAGES: int = 5
