"""Loans and the bankruptcy watchdog."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from resort_sim.config import BankruptcyTuning, LoanTerms
from resort_sim.types import round_half_up

logger = logging.getLogger(__name__)

# Loan amounts are settled in whole cents.
_CENTS = 2


@dataclass(frozen=True)
class LoanState:
    principal: int
    rate: float
    total_owed: int
    remaining_owed: float
    payment_per_second: float
    payments_made: int = 0


@dataclass(frozen=True)
class LoanOffer:
    principal: int
    rate: float
    total_owed: int
    payment_per_second: float


def loan_offers(terms: LoanTerms = LoanTerms()) -> list[LoanOffer]:
    """The loans the player can choose from, with their repayment figures."""
    offers: list[LoanOffer] = []
    for principal, rate in terms.offers:
        total = round_half_up(principal * (1 + rate))
        offers.append(LoanOffer(principal, rate, total, total / terms.duration))
    return offers


def take_loan(
    current: LoanState | None,
    principal: int,
    rate: float,
    terms: LoanTerms = LoanTerms(),
) -> LoanState | None:
    """Create a loan, or return None when one is already outstanding."""
    if principal <= 0:
        raise ValueError(f"principal must be > 0, got {principal}")
    if rate < 0:
        raise ValueError(f"rate must be >= 0, got {rate}")
    if current is not None:
        return None
    total_owed = round_half_up(principal * (1 + rate))
    return LoanState(
        principal=principal,
        rate=rate,
        total_owed=total_owed,
        remaining_owed=float(total_owed),
        payment_per_second=total_owed / terms.duration,
    )


def loan_tick(loan: LoanState | None) -> tuple[LoanState | None, float]:
    """One repayment. Returns ``(loan_after, amount_to_debit)``.

    Debits are whole cents. Each one brings the running total up to the
    scheduled amount for this many payments, so the debits sum to exactly
    ``total_owed`` and the last one clears the balance.
    """
    if loan is None:
        return None, 0.0
    payments = loan.payments_made + 1
    paid_before = round(loan.total_owed - loan.remaining_owed, _CENTS)
    paid = min(float(loan.total_owed), round(payments * loan.payment_per_second, _CENTS))
    debit = round(paid - paid_before, _CENTS)
    remaining = round(loan.total_owed - paid, _CENTS)
    if remaining <= 0:
        logger.debug("Loan of %d repaid after %d payments", loan.principal, payments)
        return None, debit
    return replace(loan, remaining_owed=remaining, payments_made=payments), debit


class BankruptcyWatchdog:
    """Tracks sustained insolvency; trips once and stays tripped until reset."""

    def __init__(self, tuning: BankruptcyTuning = BankruptcyTuning()) -> None:
        self._tuning = tuning
        self.negative_timer = 0.0
        self.debt_timer = 0.0
        self.bankrupt = False

    def observe(self, money: float, payment: float, income: float, dt: float) -> bool:
        """Feed one watchdog tick. Returns True only on the tick that bankrupts."""
        if self.bankrupt:
            return False
        t = self._tuning

        if money < 0:
            self.negative_timer += dt
        else:
            self.negative_timer = 0.0

        if payment > 0 and payment > income * t.debt_income_ratio:
            self.debt_timer += dt
        else:
            self.debt_timer = 0.0

        # Timers accumulate in float steps, compare with a little slack.
        if (
            self.negative_timer >= t.negative_seconds - 1e-9
            or self.debt_timer >= t.debt_seconds - 1e-9
        ):
            self.bankrupt = True
            logger.info(
                "Bankrupt (negative for %.2fs, over-indebted for %.2fs)",
                self.negative_timer, self.debt_timer,
            )
            return True
        return False

    def reset(self) -> None:
        self.negative_timer = 0.0
        self.debt_timer = 0.0
        self.bankrupt = False
