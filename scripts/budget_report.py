#!/usr/bin/env python3
"""Print an owner's budgets with allocation status."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_planner import AuthError, StorageError, db
from budget_planner.auth import env_owner, static_owner
from budget_planner.budgets import BudgetAggregator, allocation_summary, category_breakdown
from budget_planner.config import configure_logging
from budget_planner.formatting import format_currency, format_percent


def main(owner: Optional[str] = None, db_path: Optional[str] = None, detail: bool = False) -> int:
    db.init_db(db_path)
    resolver = static_owner(owner) if owner else env_owner()
    aggregator = BudgetAggregator(db.BudgetStore(db_path), resolver)

    try:
        budgets = aggregator.list()
    except AuthError:
        print("No owner given. Pass --owner or set BUDGET_PLANNER_OWNER.")
        return 1
    except StorageError as e:
        print(f"Failed to load budgets: {e}")
        return 1

    if not budgets:
        print("No budgets yet.")
        return 0

    over = 0
    for budget in budgets:
        summary = allocation_summary(budget)
        print(f"{budget['name'] or '(unnamed)'}  {budget['start_date']} → {budget['end_date']}")
        print(
            f"  {format_currency(summary['total_allocated'])} of {format_currency(summary['amount'])} allocated "
            f"({format_percent(summary['percent_allocated'])}), "
            f"{format_currency(summary['remaining'])} remaining"
        )
        if summary['over_allocated']:
            over += 1
            print("  ⚠️ Allocated amount exceeds total budget.")
        if detail and budget['categories']:
            print(category_breakdown(budget['categories']).to_string(index=False))

    if over:
        print(f"\n{over} budget(s) over-allocated.")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show budgets with allocated and remaining amounts.')
    parser.add_argument('--owner', help='Owner id (defaults to BUDGET_PLANNER_OWNER)')
    parser.add_argument('--db', dest='db_path', help='Path to the SQLite database')
    parser.add_argument('--detail', action='store_true', help='Show per-category breakdown')
    args = parser.parse_args()
    configure_logging()
    raise SystemExit(main(owner=args.owner, db_path=args.db_path, detail=args.detail))
