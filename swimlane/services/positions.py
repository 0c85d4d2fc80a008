from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Table, update

from swimlane.db.proxy import Row


def renumber_statements(
    table: Table,
    rows: Sequence[Row],
    now: datetime,
    extra_values: Optional[Dict[int, dict]] = None,
) -> List:
    """
    Build UPDATE statements giving rows their list index as position

    Args:
        table: Table the rows belong to
        rows: Rows in their new order
        now: Value for date_updated
        extra_values: Additional values per row id (e.g. a new lane_id)

    Returns:
        Statements for the rows whose values actually change
    """
    extra_values = extra_values or {}
    statements = []
    for index, row in enumerate(rows):
        values = dict(extra_values.get(row["id"], {}))
        changed = {key: value for key, value in values.items() if row.get(key) != value}
        if row.get("position") != index:
            changed["position"] = index
        if not changed and row["id"] not in extra_values:
            continue
        changed["date_updated"] = now
        statements.append(
            update(table).where(table.c.id == row["id"]).values(**changed)
        )
    return statements
