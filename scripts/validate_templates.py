#!/usr/bin/env python3
"""Lightweight validator for the packaged budget templates."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

TEMPLATES_FILE = Path(__file__).resolve().parents[1] / "budget_planner" / "defaults" / "templates.json"


def validate_template(template: Dict[str, Any]) -> List[str]:
    errors = []
    if not template.get("id"):
        errors.append("missing 'id'")
    if not template.get("name"):
        errors.append("missing 'name'")

    categories = template.get("categories")
    if not isinstance(categories, list):
        errors.append("categories must be a list")
        return errors
    for index, category in enumerate(categories):
        if not isinstance(category, dict) or not category.get("name"):
            errors.append(f"categories[{index}] missing 'name'")
            continue
        amount = category.get("amount", 0)
        if not isinstance(amount, (int, float)) or amount < 0:
            errors.append(f"categories[{index}].amount must be a non-negative number")
    return errors


def main() -> int:
    if not TEMPLATES_FILE.exists():
        print(f"Templates file not found: {TEMPLATES_FILE}")
        return 1

    with TEMPLATES_FILE.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    issues = []
    seen = set()
    for group, templates in data.get("groups", {}).items():
        for template in templates:
            template_id = template.get("id", "?")
            if template_id in seen:
                issues.append((group, template_id, "duplicate id"))
            seen.add(template_id)
            for message in validate_template(template):
                issues.append((group, template_id, message))

    if issues:
        print("Template validation failed:")
        for group, template_id, message in issues:
            print(f"  - {group}/{template_id}: {message}")
        return 1

    print("All templates validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
