"""
Rater-vs-rater deltas for review screens.

Read-only: nothing here feeds the final score. Categories and items are the
union of both submissions, so a category only one rater scored still shows
up (with 0 on the other side). ``difference`` is ``other - base``; positive
means the other rater scored higher.

Rows follow the template's category and item order when a template is
given; ids the template does not know come after, in the order first seen
(base first, then other). Without a template the first-seen order is kept.
"""
from typing import Dict, List, Optional, Sequence

from review_app.services.category_math import category_score
from review_app.services.scoring_types import (
    CategoryDiff, CategoryItemDiffs, DetailedScore, ItemDiff, Template,
)


def _category_value(detailed: DetailedScore, template: Optional[Template]) -> float:
    if template is not None:
        category = template.find_category(detailed.category_id)
        if category is not None:
            return category_score(detailed.items, category)
    return detailed.category_score


def _category_name(category_id: str, template: Optional[Template]) -> str:
    category = template.find_category(category_id) if template else None
    return category.name if category else category_id


def _ordered(ids, known_order: Sequence[str]) -> List[str]:
    known = [i for i in known_order if i in ids]
    return known + [i for i in ids if i not in known_order]


def category_diffs(
    base: Sequence[DetailedScore],
    other: Sequence[DetailedScore],
    template: Optional[Template] = None,
) -> List[CategoryDiff]:
    rows: Dict[str, dict] = {}

    for detailed in base or ():
        rows[detailed.category_id] = {"base": _category_value(detailed, template), "other": 0.0}

    for detailed in other or ():
        row = rows.setdefault(detailed.category_id, {"base": 0.0, "other": 0.0})
        row["other"] = _category_value(detailed, template)

    order = [c.id for c in template.categories] if template else []
    return [
        CategoryDiff(
            category_id=category_id,
            category_name=_category_name(category_id, template),
            base_score=rows[category_id]["base"],
            other_score=rows[category_id]["other"],
            difference=rows[category_id]["other"] - rows[category_id]["base"],
        )
        for category_id in _ordered(rows, order)
    ]


def item_diffs(
    base: Sequence[DetailedScore],
    other: Sequence[DetailedScore],
    template: Optional[Template] = None,
) -> List[CategoryItemDiffs]:
    by_category: Dict[str, Dict[str, dict]] = {}

    def _collect(scores, side):
        for detailed in scores or ():
            items = by_category.setdefault(detailed.category_id, {})
            for scored in detailed.items:
                row = items.setdefault(scored.item_id, {"base": 0.0, "other": 0.0})
                row[side] = scored.score

    _collect(base, "base")
    _collect(other, "other")

    order = [c.id for c in template.categories] if template else []
    result = []
    for category_id in _ordered(by_category, order):
        items = by_category[category_id]
        category = template.find_category(category_id) if template else None
        rows = []
        for item_id in _ordered(items, [i.id for i in category.items] if category else []):
            row = items[item_id]
            item = category.find_item(item_id) if category else None
            rows.append(ItemDiff(
                item_id=item_id,
                item_name=item.name if item else item_id,
                base_score=row["base"],
                other_score=row["other"],
                difference=row["other"] - row["base"],
                item_weight=item.weight if item else None,
                max_score=item.max_score if item else None,
            ))
        result.append(CategoryItemDiffs(
            category_id=category_id,
            category_name=_category_name(category_id, template),
            items=rows,
        ))
    return result


def flag_large_differences(diffs: Sequence, threshold: float) -> list:
    """Rows whose absolute difference is above ``threshold``, worth a conversation."""
    return [d for d in diffs if abs(d.difference) > threshold]
