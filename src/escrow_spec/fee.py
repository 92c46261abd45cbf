"""Fee and dispute distribution arithmetic.

Integer math only. Amounts are bounded by ``MAX_AMOUNT`` so the products below
stay inside the u128 x u16 range an on-chain implementation would use.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import FEE_BASIS_POINTS, MAX_AMOUNT, MAX_BPS, PERCENT_TOTAL
from .errors import ErrorCode, SpecError


@dataclass(frozen=True)
class Distribution:
    fee: int
    penalty: int
    distributable: int
    client_share: int
    freelancer_share: int

    @property
    def arbitrator_share(self) -> int:
        return self.fee + self.penalty

    @property
    def dust(self) -> int:
        """Remainder lost to floor division; stays in custody."""
        return self.distributable - self.client_share - self.freelancer_share


def check_amount(amount: int) -> None:
    if amount < 0 or amount > MAX_AMOUNT:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "amount out of range")


def compute_fee(amount: int, fee_bps: int = FEE_BASIS_POINTS) -> int:
    """fee = floor(amount * fee_bps / 10000)."""
    check_amount(amount)
    if fee_bps < 0 or fee_bps > MAX_BPS:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "fee basis points out of range")
    return amount * fee_bps // MAX_BPS


def split_payout(amount: int, fee_bps: int = FEE_BASIS_POINTS) -> tuple[int, int]:
    """Return (payout, fee) for a release; payout + fee == amount."""
    fee = compute_fee(amount, fee_bps)
    return amount - fee, fee


def compute_distribution(
    amount: int,
    client_pct: int,
    freelancer_pct: int,
    penalty: int,
    fee_bps: int = FEE_BASIS_POINTS,
) -> Distribution:
    """Split a disputed escrow between client, freelancer and arbitrator."""
    if client_pct < 0 or freelancer_pct < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "percentages must be >= 0")
    if client_pct + freelancer_pct != PERCENT_TOTAL:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "percentages must sum to 100")
    if penalty < 0:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "penalty must be >= 0")
    if penalty > amount:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "penalty exceeds escrow amount")

    fee = compute_fee(amount, fee_bps)
    if fee + penalty > amount:
        raise SpecError(ErrorCode.INVALID_AMOUNT, "fee plus penalty exceeds escrow amount")

    distributable = amount - fee - penalty
    return Distribution(
        fee=fee,
        penalty=penalty,
        distributable=distributable,
        client_share=distributable * client_pct // PERCENT_TOTAL,
        freelancer_share=distributable * freelancer_pct // PERCENT_TOTAL,
    )
