"""Atomic adjustments of cached counter columns."""
from __future__ import annotations

from sqlalchemy import case, update
from sqlalchemy.orm import InstrumentedAttribute, Session


def adjust_counter(
    db: Session,
    column: InstrumentedAttribute[int],
    row_id: int,
    delta: int,
) -> None:
    """Add ``delta`` to ``column`` on a single row, flooring the result at zero.

    The arithmetic happens in the UPDATE statement itself so concurrent
    requests never overwrite each other's increments.
    """
    if delta == 0:
        return
    model = column.class_
    if delta > 0:
        new_value = column + delta
    else:
        new_value = case((column + delta > 0, column + delta), else_=0)
    db.execute(
        update(model)
        .where(model.id == row_id)
        .values({column.key: new_value})
        .execution_options(synchronize_session="fetch")
    )
