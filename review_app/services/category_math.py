from dataclasses import replace
from typing import Sequence, Tuple

from review_app.services.scoring_types import (
    FULL_SCALE, Category, DetailedScore, DetailedScoreItem, Template,
)


def category_score(items: Sequence[DetailedScoreItem], category: Category) -> float:
    """
    Weighted score of one category for one rater.

    Scores whose item id is no longer in the category are skipped: the
    template may have changed after the draft was started. The weighted sum
    is normalized by the weight of the items actually matched, so a half
    filled draft still reads on the items' own scale. Item scores are used
    as entered, whatever their max_score. Nothing matched -> 0.
    """
    total_score = 0.0
    total_weight = 0.0

    for scored in items:
        item = category.find_item(scored.item_id)
        if item is None:
            continue
        total_score += scored.score * (item.weight / FULL_SCALE)
        total_weight += item.weight

    if total_weight <= 0:
        return 0.0
    return (total_score / total_weight) * FULL_SCALE


def template_score(detailed_scores: Sequence[DetailedScore], template: Template) -> float:
    """
    Weighted score of a whole template for one rater.

    Same tolerance as ``category_score``: unknown categories are skipped and
    the result is normalized by the weight of the categories present.
    The stored ``category_score`` is ignored; it is recomputed from the items.
    """
    total_score = 0.0
    total_weight = 0.0

    for detailed in detailed_scores:
        category = template.find_category(detailed.category_id)
        if category is None:
            continue
        total_score += category_score(detailed.items, category) * (category.weight / FULL_SCALE)
        total_weight += category.weight

    if total_weight <= 0:
        return 0.0
    return (total_score / total_weight) * FULL_SCALE


def category_scores(detailed_scores: Sequence[DetailedScore], template: Template) -> dict:
    """Map category id -> recomputed score for the categories the template knows."""
    scores = {}
    for detailed in detailed_scores:
        category = template.find_category(detailed.category_id)
        if category is not None:
            scores[category.id] = category_score(detailed.items, category)
    return scores


def refresh_category_scores(
    detailed_scores: Sequence[DetailedScore], template: Template
) -> Tuple[DetailedScore, ...]:
    """Copy of ``detailed_scores`` with every derived category_score recomputed."""
    refreshed = []
    for detailed in detailed_scores:
        category = template.find_category(detailed.category_id)
        score = category_score(detailed.items, category) if category is not None else 0.0
        refreshed.append(replace(detailed, category_score=score))
    return tuple(refreshed)
