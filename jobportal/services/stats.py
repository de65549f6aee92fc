"""
Aggregation helpers for the stats endpoints.

The routes GROUP BY status in SQL; these fold the grouped rows into the
response shape, with every known status present (0 when absent).
"""

from typing import Dict, Iterable, List


def status_breakdown(rows: List[dict], statuses: Iterable[str], count_key: str = "count") -> Dict[str, int]:
    """{status: count} for every status in `statuses`, plus any unexpected ones found in rows."""
    breakdown = {status: 0 for status in statuses}
    for row in rows:
        breakdown[row["status"]] = breakdown.get(row["status"], 0) + int(row[count_key] or 0)
    return breakdown


def amounts_by_currency(rows: List[dict], status: str) -> Dict[str, float]:
    """Sum of `amount` per currency over the rows with the given status."""
    totals: Dict[str, float] = {}
    for row in rows:
        if row["status"] != status:
            continue
        totals[row["currency"]] = round(totals.get(row["currency"], 0.0) + float(row["amount"] or 0), 2)
    return totals
