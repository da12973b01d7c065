"""
================================================================================
Retry Policy and Interaction Outcomes
================================================================================

Bounded retry of a single interaction. A policy names how many attempts to
make, how long to pause between them and which DriverError kinds are worth
another attempt. attempt() returns an InteractionOutcome instead of raising,
so callers decide whether to escalate or re-raise.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Optional

from loguru import logger

from .driver import DriverError, ErrorKind


# The driver's generic interaction-failure class
INTERACTION_FAILURES: FrozenSet[ErrorKind] = frozenset(
    {ErrorKind.DRIVER, ErrorKind.NOT_INTERACTABLE, ErrorKind.STALE_REFERENCE}
)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attributes:
        max_attempts: Total attempts, at least 1
        delay: Seconds to pause between attempts
        retryable: Error kinds that trigger another attempt
    """
    max_attempts: int = 3
    delay: float = 0.25
    retryable: FrozenSet[ErrorKind] = field(default_factory=lambda: INTERACTION_FAILURES)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")


CLICK_POLICY = RetryPolicy(max_attempts=10, delay=0.25, retryable=INTERACTION_FAILURES)
TYPE_POLICY = RetryPolicy(max_attempts=8, delay=0.25, retryable=frozenset({ErrorKind.NOT_INTERACTABLE}))


class InteractionOutcome:
    """Result of attempt(): Success, RetriesExhausted or NonRetryableFailure."""
    attempts: int

    @property
    def succeeded(self) -> bool:
        return isinstance(self, Success)

    def unwrap(self) -> Any:
        """Return the value on success, otherwise re-raise the carried error unchanged."""
        raise NotImplementedError


@dataclass
class Success(InteractionOutcome):
    value: Any
    attempts: int

    def unwrap(self) -> Any:
        return self.value


@dataclass
class RetriesExhausted(InteractionOutcome):
    last_error: DriverError
    attempts: int

    def unwrap(self) -> Any:
        raise self.last_error


@dataclass
class NonRetryableFailure(InteractionOutcome):
    error: BaseException
    attempts: int

    def unwrap(self) -> Any:
        raise self.error


def attempt(
    action: Callable[[], Any],
    policy: RetryPolicy,
    sleep: Callable[[float], None],
    description: str = "",
) -> InteractionOutcome:
    """
    Run ``action`` under ``policy``.

    Errors whose kind is retryable consume one attempt and are followed by
    ``policy.delay``; any other Exception ends the loop at once.

    Args:
        action: The interaction, re-run from scratch on each attempt
        policy: Attempt budget, pause and retryable kinds
        sleep: Blocking delay in seconds
        description: Name of the interaction for log lines
    """
    last_error: Optional[DriverError] = None
    for number in range(1, policy.max_attempts + 1):
        try:
            return Success(action(), number)
        except DriverError as e:
            if e.kind not in policy.retryable:
                return NonRetryableFailure(e, number)
            last_error = e
            if number < policy.max_attempts:
                logger.warning(
                    f"Attempt {number}/{policy.max_attempts} failed for {description}: {e}. "
                    f"Retrying in {policy.delay}s..."
                )
                sleep(policy.delay)
        except Exception as e:
            return NonRetryableFailure(e, number)

    logger.error(f"All {policy.max_attempts} attempts failed for {description}: {last_error}")
    return RetriesExhausted(last_error, policy.max_attempts)


__all__ = [
    "INTERACTION_FAILURES",
    "RetryPolicy",
    "CLICK_POLICY",
    "TYPE_POLICY",
    "InteractionOutcome",
    "Success",
    "RetriesExhausted",
    "NonRetryableFailure",
    "attempt",
]
