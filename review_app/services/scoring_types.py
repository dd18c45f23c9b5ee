"""
Plain data types used by the scoring engine.

Nothing in here touches Django: templates and detailed scores are parsed from
their JSON shape into frozen dataclasses once, and every scoring function
works on those.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple, Union

SELF = "self"
LEADER = "leader"
BOSS = "boss"
EVALUATOR_TYPES = (SELF, LEADER, BOSS)

SIMPLE_WEIGHTED = "simple_weighted"
TWO_TIER_WEIGHTED = "two_tier_weighted"

FULL_SCALE = 100

MISSING_TWO_TIER = "Two-tier scoring mode requires two_tier_config"


class TemplateConfigError(ValueError):
    """The config cannot be turned into a Template at all."""


# ── Template ────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Item:
    id: str
    name: str
    weight: float
    max_score: float = FULL_SCALE
    description: str = ""


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    weight: float
    evaluator_types: frozenset = frozenset(EVALUATOR_TYPES)
    items: Tuple[Item, ...] = ()
    description: str = ""

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


@dataclass(frozen=True)
class SimpleWeighted:
    """Flat self / leader / boss weights, stored as fractions."""
    mode: ClassVar[str] = SIMPLE_WEIGHTED

    self_weight: float
    leader_weight: float
    boss_weight: Optional[float] = None
    boss_enabled: bool = False


@dataclass(frozen=True)
class TwoTierWeighted:
    """
    First tier splits employee+leader against boss, second tier splits the
    employee+leader share between self and leader. All values are percentages.
    A config without its two_tier_config block parses with every field None.
    """
    mode: ClassVar[str] = TWO_TIER_WEIGHTED

    employee_leader_weight: Optional[float] = None
    boss_weight: Optional[float] = None
    self_weight_within_tier: Optional[float] = None
    leader_weight_within_tier: Optional[float] = None

    @property
    def is_configured(self) -> bool:
        return None not in (
            self.employee_leader_weight, self.boss_weight,
            self.self_weight_within_tier, self.leader_weight_within_tier,
        )


ScoringRules = Union[SimpleWeighted, TwoTierWeighted]


@dataclass(frozen=True)
class Template:
    categories: Tuple[Category, ...]
    scoring_rules: ScoringRules
    allow_partial_aggregation: bool = False

    def find_category(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def categories_for(self, evaluator_type: str) -> Tuple[Category, ...]:
        return tuple(c for c in self.categories if evaluator_type in c.evaluator_types)


# ── Scores ──────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class DetailedScoreItem:
    item_id: str
    score: float
    comment: str = ""


@dataclass(frozen=True)
class DetailedScore:
    category_id: str
    items: Tuple[DetailedScoreItem, ...] = ()
    # derived value, recomputable from items
    category_score: float = 0.0


@dataclass(frozen=True)
class EvaluationSet:
    self_scores: Optional[Tuple[DetailedScore, ...]] = None
    leader_scores: Optional[Tuple[DetailedScore, ...]] = None
    boss_scores: Optional[Tuple[DetailedScore, ...]] = None

    def for_rater(self, evaluator_type: str) -> Optional[Tuple[DetailedScore, ...]]:
        return getattr(self, f"{evaluator_type}_scores")


# ── Results ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ResolvedWeights:
    self_weight: float
    leader_weight: float
    boss_weight: float
    has_boss: bool

    def for_rater(self, evaluator_type: str) -> float:
        return {
            SELF: self.self_weight,
            LEADER: self.leader_weight,
            BOSS: self.boss_weight,
        }[evaluator_type]


@dataclass(frozen=True)
class WeightValidation:
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryBreakdown:
    category_id: str
    category_name: str
    category_weight: float
    rater_scores: Dict[str, Optional[float]]
    combined_score: float


@dataclass(frozen=True)
class FinalScoreBreakdown:
    weights: ResolvedWeights
    rater_scores: Dict[str, Optional[float]]
    categories: List[CategoryBreakdown]
    missing_raters: List[str]
    is_complete: bool
    # None when raters are missing and partial aggregation is not allowed
    final_score: Optional[float]


@dataclass(frozen=True)
class CategoryDiff:
    category_id: str
    category_name: str
    base_score: float
    other_score: float
    difference: float


@dataclass(frozen=True)
class ItemDiff:
    item_id: str
    item_name: str
    base_score: float
    other_score: float
    difference: float
    item_weight: Optional[float] = None
    max_score: Optional[float] = None


@dataclass(frozen=True)
class CategoryItemDiffs:
    category_id: str
    category_name: str
    items: List[ItemDiff]


# ── Parsing from the JSON shape ─────────────────────────────────────────
def _number(value, label: str) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise TemplateConfigError(f"{label} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise TemplateConfigError(f"{label} must be a number, got {value!r}") from None


def as_fractions(*weights: Optional[float]) -> Tuple[Optional[float], ...]:
    """
    Put a group of rater weights on the 0..1 scale.

    Weights are either all fractions (0.4, 0.6) or all percentages (40, 60);
    any value above 1 marks the whole group as percentages. A percentage
    group where no weight exceeds 1, such as 1 / 0, is therefore read as
    fractions (100% / 0%).
    """
    present = [w for w in weights if w is not None]
    if any(w > 1 for w in present):
        return tuple(None if w is None else w / FULL_SCALE for w in weights)
    return tuple(weights)


def _parse_item(raw: Mapping, category_name: str) -> Item:
    item_id = str(raw.get("id", "")).strip()
    if not item_id:
        raise TemplateConfigError(f'An item in "{category_name}" has no id')
    name = raw.get("name") or item_id
    max_score = _number(raw.get("max_score", FULL_SCALE), f'"{name}" max_score')
    if max_score <= 0:
        raise TemplateConfigError(f'"{name}" max_score must be positive')
    return Item(
        id=item_id,
        name=name,
        weight=_number(raw.get("weight"), f'"{name}" weight'),
        max_score=max_score,
        description=raw.get("description") or "",
    )


def _parse_category(raw: Mapping) -> Category:
    category_id = str(raw.get("id", "")).strip()
    if not category_id:
        raise TemplateConfigError("A category has no id")
    name = raw.get("name") or category_id
    evaluator_types = raw.get("evaluator_types") or EVALUATOR_TYPES
    unknown = set(evaluator_types) - set(EVALUATOR_TYPES)
    if unknown:
        raise TemplateConfigError(f'"{name}" has unknown evaluator types: {", ".join(sorted(unknown))}')
    items = tuple(_parse_item(i, name) for i in raw.get("items") or [])
    return Category(
        id=category_id,
        name=name,
        weight=_number(raw.get("weight"), f'"{name}" weight'),
        evaluator_types=frozenset(evaluator_types),
        items=items,
        description=raw.get("description") or "",
    )


def scoring_rules_from_config(raw: Optional[Mapping]) -> ScoringRules:
    raw = raw or {}
    mode = raw.get("scoring_mode") or SIMPLE_WEIGHTED

    if mode == SIMPLE_WEIGHTED:
        self_cfg = raw.get("self_evaluation") or {}
        leader_cfg = raw.get("leader_evaluation") or {}
        boss_cfg = raw.get("boss_evaluation")
        boss_raw = None
        if boss_cfg is not None:
            boss_raw = _number(boss_cfg.get("weight_in_final"), "Boss weight")
        self_w, leader_w, boss_w = as_fractions(
            _number(self_cfg.get("weight_in_final"), "Self weight"),
            _number(leader_cfg.get("weight_in_final"), "Leader weight"),
            boss_raw,
        )
        return SimpleWeighted(
            self_weight=self_w,
            leader_weight=leader_w,
            boss_weight=boss_w,
            boss_enabled=bool(boss_cfg and boss_cfg.get("enabled", True)),
        )

    if mode == TWO_TIER_WEIGHTED:
        tier = raw.get("two_tier_config")
        if not tier:
            return TwoTierWeighted()
        return TwoTierWeighted(
            employee_leader_weight=_number(tier.get("employee_leader_weight"), "employee_leader_weight"),
            boss_weight=_number(tier.get("boss_weight"), "boss_weight"),
            self_weight_within_tier=_number(
                tier.get("self_weight_in_employee_leader"), "self_weight_in_employee_leader"),
            leader_weight_within_tier=_number(
                tier.get("leader_weight_in_employee_leader"), "leader_weight_in_employee_leader"),
        )

    raise TemplateConfigError(f"Unknown scoring mode: {mode}")


def template_from_config(config: Optional[Mapping], *, complete: bool = True) -> Template:
    """
    Parse a template config.

    With ``complete=False`` a two-tier config missing its tier block still
    parses, so the weight validator can report it next to every other
    problem. Anything that scores needs the default.
    """
    if not isinstance(config, Mapping):
        raise TemplateConfigError("Template config must be an object")
    categories = tuple(_parse_category(c) for c in config.get("categories") or [])

    seen = set()
    for category in categories:
        if category.id in seen:
            raise TemplateConfigError(f"Duplicate category id: {category.id}")
        seen.add(category.id)
        item_ids = [i.id for i in category.items]
        if len(item_ids) != len(set(item_ids)):
            raise TemplateConfigError(f'Duplicate item id in "{category.name}"')

    scoring_rules = scoring_rules_from_config(config.get("scoring_rules"))
    if complete and isinstance(scoring_rules, TwoTierWeighted) and not scoring_rules.is_configured:
        raise TemplateConfigError(MISSING_TWO_TIER)

    return Template(
        categories=categories,
        scoring_rules=scoring_rules,
        allow_partial_aggregation=bool(config.get("allow_partial_aggregation", False)),
    )


def detailed_scores_from_payload(payload: Optional[Sequence[Mapping]]) -> Tuple[DetailedScore, ...]:
    """Accepts the camelCase wire shape used by the review forms."""
    scores = []
    for raw in payload or []:
        items = tuple(
            DetailedScoreItem(
                item_id=str(i.get("itemId")),
                score=_number(i.get("score"), f'Score for item {i.get("itemId")}'),
                comment=i.get("comment") or "",
            )
            for i in raw.get("items") or []
        )
        scores.append(DetailedScore(
            category_id=str(raw.get("categoryId")),
            items=items,
            category_score=_number(raw.get("categoryScore"), f'Score for category {raw.get("categoryId")}'),
        ))
    return tuple(scores)


def detailed_scores_to_payload(scores: Sequence[DetailedScore]) -> List[dict]:
    return [
        {
            "categoryId": s.category_id,
            "categoryScore": s.category_score,
            "items": [
                {"itemId": i.item_id, "score": i.score, "comment": i.comment}
                for i in s.items
            ],
        }
        for s in scores
    ]
