"""BudgetReport value object and saturating counters for token accounting."""

import sys

from pydantic import BaseModel, Field

MAX_COUNTER = sys.maxsize


class BudgetReport(BaseModel, frozen=True):
    """Running totals of model usage for one pipeline invocation."""

    tokens_used: int = Field(default=0, ge=0)
    calls_made: int = Field(default=0, ge=0)

    def record_call(self, tokens_in: int, tokens_out: int) -> "BudgetReport":
        """Return a new report with one more call and its tokens added."""
        return BudgetReport(
            tokens_used=safe_add_tokens(
                current=self.tokens_used, tokens_in=tokens_in, tokens_out=tokens_out
            ),
            calls_made=safe_increment_calls(current=self.calls_made),
        )


def safe_add_tokens(current: int, tokens_in: int, tokens_out: int) -> int:
    """Add token counts, saturating at MAX_COUNTER.

    Negative inputs are rejected by returning ``current`` unchanged, so the
    result is never below the current value.
    """
    if current < 0 or tokens_in < 0 or tokens_out < 0:
        return current
    if current > MAX_COUNTER - tokens_in - tokens_out:
        return MAX_COUNTER
    return current + tokens_in + tokens_out


def safe_increment_calls(current: int) -> int:
    """Increment a call counter, saturating at MAX_COUNTER."""
    if current >= MAX_COUNTER:
        return MAX_COUNTER
    return current + 1
