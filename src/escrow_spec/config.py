"""Escrow engine configuration constants.

Amounts are unsigned 128-bit integers; every bound below is enforced by the
operation verifiers in `escrow_spec.ops`.
"""

# Fees
FEE_BASIS_POINTS = 250  # 2.5%
MAX_BPS = 10_000

# Dispute distribution
PERCENT_TOTAL = 100

# Amounts
MAX_AMOUNT = 2**128 - 1

# Text limits
MAX_DESCRIPTION_LEN = 500
MAX_REASON_LEN = 500
MAX_RESOLUTION_LEN = 500

# Identifiers
FIRST_ESCROW_ID = 1

# Accounts
CUSTODY_ACCOUNT = "escrow:custody"
