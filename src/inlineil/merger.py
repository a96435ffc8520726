"""Apply insertion plans to a document."""

from __future__ import annotations

from typing import Sequence

from inlineil.locator import InsertionPlan
from inlineil.snippet import build_snippet


def merge_all(document: Sequence[str], plans: Sequence[InsertionPlan]) -> list[str]:
    """Splice every planned snippet into a copy of *document*.

    All plan indices must refer to *document* as given. Plans are applied
    highest index first, so each splice only shifts lines that no pending
    plan refers to. Plans sharing an index end up in discovery order.
    """
    buffer = list(document)
    size = len(buffer)
    for plan in plans:
        if not 0 <= plan.insert_index <= size:
            raise ValueError(
                f"insert index {plan.insert_index} out of range for a "
                f"{size}-line document ({plan.snippet})"
            )

    # Among equal indices the last discovered is spliced first
    ordered = sorted(enumerate(plans), key=lambda p: (p[1].insert_index, p[0]), reverse=True)
    for _, plan in ordered:
        idx = plan.insert_index
        buffer[idx:idx] = build_snippet(plan.snippet)
    return buffer
