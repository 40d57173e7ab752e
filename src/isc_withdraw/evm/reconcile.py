"""Fixed-point reconciliation of the withdrawn amount and its gas limit.

The amount encoded in the calldata must be the balance minus the fee, but the
fee depends on the gas estimate for that very calldata. Gas usage is not a
linear function of the amount (the encoded amount changes the work done by the
contract), so the pair is resolved by iterating: each round rebuilds the
calldata for ``balance - previous_gas`` and asks the node for a new estimate.

Which round is adopted is decided by a :class:`ReconcilePolicy`.
:class:`FixedRoundsPolicy` runs three rounds and adopts the second one, which
is the behaviour transactions have been observed to succeed with on ShimmerEVM.
:class:`ConvergencePolicy` instead stops once two consecutive estimates agree.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from ..exceptions import EstimationError, InsufficientFundsError

logger = logging.getLogger(__name__)

CalldataBuilder = Callable[[int], bytes]


class FeeEstimator(Protocol):
    def __call__(self, calldata: bytes) -> Awaitable[int]: ...


@dataclass(frozen=True)
class ReconcileRound:
    """One calldata/estimate sample of the reconciliation loop."""

    index: int
    base_tokens: int
    gas_limit: int
    calldata: bytes


@dataclass(frozen=True)
class Reconciliation:
    """All rounds that were run and the one adopted for the transaction."""

    balance: int
    rounds: tuple[ReconcileRound, ...]
    adopted: ReconcileRound

    @property
    def gas_limit(self) -> int:
        return self.adopted.gas_limit

    @property
    def calldata(self) -> bytes:
        return self.adopted.calldata

    @property
    def base_tokens(self) -> int:
        return self.adopted.base_tokens


class ReconcilePolicy(Protocol):
    max_rounds: int

    def select(self, rounds: Sequence[ReconcileRound]) -> ReconcileRound | None:
        """Return the round to adopt, or ``None`` to keep iterating."""
        ...


@dataclass(frozen=True)
class FixedRoundsPolicy:
    """Run exactly ``rounds`` rounds and adopt the one at index ``adopt``.

    The later rounds are sampled for observability only.
    """

    rounds: int = 3
    adopt: int = 1

    def __post_init__(self) -> None:
        if self.rounds < 1:
            raise ValueError("rounds must be positive")
        if not 0 <= self.adopt < self.rounds:
            raise ValueError("adopt must index one of the executed rounds")

    @property
    def max_rounds(self) -> int:
        return self.rounds

    def select(self, rounds: Sequence[ReconcileRound]) -> ReconcileRound | None:
        if len(rounds) < self.rounds:
            return None
        return rounds[self.adopt]


@dataclass(frozen=True)
class ConvergencePolicy:
    """Adopt the first round whose estimate is within ``tolerance`` of the previous one."""

    max_rounds: int = 8
    tolerance: int = 0

    def __post_init__(self) -> None:
        if self.max_rounds < 2:
            raise ValueError("max_rounds must allow at least two rounds")
        if self.tolerance < 0:
            raise ValueError("tolerance cannot be negative")

    def select(self, rounds: Sequence[ReconcileRound]) -> ReconcileRound | None:
        if len(rounds) < 2:
            return None
        previous, current = rounds[-2], rounds[-1]
        if abs(current.gas_limit - previous.gas_limit) <= self.tolerance:
            return current
        return None


class BalanceReconciler:
    """Drive the calldata builder and fee estimator to a consistent pair."""

    def __init__(
        self,
        build_calldata: CalldataBuilder,
        estimate: FeeEstimator,
        *,
        policy: ReconcilePolicy | None = None,
    ) -> None:
        self._build_calldata = build_calldata
        self._estimate = estimate
        self._policy = policy or FixedRoundsPolicy()

    async def reconcile(self, balance: int) -> Reconciliation:
        """Run the loop for a balance expressed in base tokens."""

        rounds: list[ReconcileRound] = []
        base_tokens = balance

        while len(rounds) < self._policy.max_rounds:
            if rounds:
                fee = rounds[-1].gas_limit
                base_tokens = balance - fee
                if base_tokens < 0:
                    raise InsufficientFundsError(
                        "Balance does not cover the estimated fee",
                        balance=balance,
                        fee=fee,
                        details={"round": len(rounds)},
                    )

            sample = await self._run_round(len(rounds), base_tokens)
            rounds.append(sample)

            adopted = self._policy.select(rounds)
            if adopted is not None:
                logger.info(
                    "Adopted reconcile round %d (base_tokens=%s, gas=%s) after %d rounds",
                    adopted.index,
                    adopted.base_tokens,
                    adopted.gas_limit,
                    len(rounds),
                )
                return Reconciliation(balance=balance, rounds=tuple(rounds), adopted=adopted)

        raise EstimationError(
            f"Gas estimate did not settle within {len(rounds)} rounds",
            details={"estimates": [sample.gas_limit for sample in rounds]},
        )

    async def _run_round(self, index: int, base_tokens: int) -> ReconcileRound:
        calldata = self._build_calldata(base_tokens)
        gas_limit = int(await self._estimate(calldata))
        logger.debug(
            "Stage reconcile [round %d]: base_tokens=%s gas=%s", index, base_tokens, gas_limit
        )
        return ReconcileRound(
            index=index, base_tokens=base_tokens, gas_limit=gas_limit, calldata=calldata
        )
