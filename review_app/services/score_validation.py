from typing import List, Sequence

from review_app.services.scoring_types import DetailedScore, Template


def _fmt(value: float) -> str:
    return f"{value:g}"


def validate_detailed_scores(
    detailed_scores: Sequence[DetailedScore],
    template: Template,
    *,
    evaluator_type: str = None,
    allow_unknown: bool = False,
) -> List[str]:
    """
    Input-boundary checks for one rater's scores.

    Every score must sit in [0, max_score] of its item; the aggregation math
    assumes that and does not clamp. Unknown category/item ids are errors
    on submit, but drafts pass ``allow_unknown=True`` since the template may
    have changed since the draft was started. When ``evaluator_type`` is
    given, categories that rater is not expected to score are rejected.
    """
    errors = []

    for detailed in detailed_scores:
        category = template.find_category(detailed.category_id)
        if category is None:
            if not allow_unknown:
                errors.append(f"Unknown category: {detailed.category_id}")
            continue

        if evaluator_type and evaluator_type not in category.evaluator_types:
            errors.append(f'"{category.name}" is not scored by {evaluator_type} evaluators')
            continue

        for scored in detailed.items:
            item = category.find_item(scored.item_id)
            if item is None:
                if not allow_unknown:
                    errors.append(f'Unknown item in "{category.name}": {scored.item_id}')
                continue
            if scored.score < 0 or scored.score > item.max_score:
                errors.append(
                    f'Score for "{item.name}" must be between 0 and {_fmt(item.max_score)}, '
                    f"got {_fmt(scored.score)}"
                )

    return errors


def missing_items(detailed_scores: Sequence[DetailedScore], template: Template, evaluator_type: str) -> List[str]:
    """Names of items the rater is expected to score but has not."""
    scored = {
        (d.category_id, i.item_id)
        for d in detailed_scores
        for i in d.items
    }
    return [
        f"{category.name} / {item.name}"
        for category in template.categories_for(evaluator_type)
        for item in category.items
        if (category.id, item.id) not in scored
    ]
