"""Ready-made budgets for common life events and lifestyles.

Template definitions live in ``defaults/templates.json``. Applying a
template only produces a create payload; persisting it is up to the
aggregator.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from ..defaults import get_template_config
from ..errors import ValidationError
from .models import new_category, parse_amount


def _get_config() -> Dict[str, Any]:
    return get_template_config()


def list_templates(group: Optional[str] = None) -> List[Dict[str, Any]]:
    """Templates in configuration order, first occurrence of each id wins.

    Args:
        group: Optional group name (``life-events`` or ``lifestyle``)
    """
    groups: Dict[str, List[Dict[str, Any]]] = _get_config().get('groups', {})
    selected = [group] if group else list(groups)

    seen = set()
    templates: List[Dict[str, Any]] = []
    for name in selected:
        for template in groups.get(name, []):
            template_id = template.get('id')
            if not template_id or template_id in seen:
                continue
            seen.add(template_id)
            templates.append({**template, 'group': name})
    return templates


def get_template(template_id: str) -> Optional[Dict[str, Any]]:
    for template in list_templates():
        if template['id'] == template_id:
            return template
    return None


def budget_from_template(template_id: str, start_date: Optional[str] = None) -> Dict[str, Any]:
    """Build a create payload from a template.

    Only top-level categories are used, each with a fresh id. The budget
    amount is the sum of the template's category amounts, or the configured
    default when that sum is zero.

    Raises:
        ValidationError: If the template does not exist
    """
    template = get_template(template_id)
    if template is None:
        raise ValidationError(f"Template not found: {template_id}", field='template')

    categories = []
    for item in template.get('categories', []):
        amount = parse_amount(item.get('amount'))
        categories.append(new_category(item.get('name', ''), amount or 0.0))

    total = sum(c['amount'] for c in categories)
    default_amount = float(_get_config().get('default_amount', 5000))

    return {
        'name': f"{template['name']} Budget",
        'amount': total or default_amount,
        'start_date': start_date or date.today().isoformat(),
        'categories': categories,
    }
