import pytest

from review_app.services.final_score_math import (
    final_score, required_raters, score_evaluation_set, score_level,
)
from review_app.services.scoring_types import (
    BOSS, LEADER, SELF, EvaluationSet, ResolvedWeights,
    detailed_scores_from_payload, template_from_config,
)
from review_app.tests.helpers import scores


def _weights(s, l, b):
    return ResolvedWeights(self_weight=s, leader_weight=l, boss_weight=b, has_boss=b > 0)


class TestFinalScore:
    def test_missing_rater_renormalizes_over_present_weight(self):
        result = final_score(80, 90, None, _weights(0.36, 0.54, 0.10))
        assert result == pytest.approx((80 * 0.36 + 90 * 0.54) / 0.90)
        assert result == pytest.approx(86.67, abs=0.01)

    def test_all_raters_present(self):
        assert final_score(79, 86, None, _weights(0.4, 0.6, 0)) == pytest.approx(83.2)
        assert final_score(80, 70, 90, _weights(0.48, 0.32, 0.20)) == pytest.approx(78.8)

    def test_no_raters_returns_zero(self):
        assert final_score(None, None, None, _weights(0.4, 0.6, 0)) == 0.0
        assert final_score(None, None, None, _weights(0.3, 0.3, 0.4)) == 0.0

    def test_real_zero_is_also_zero(self):
        # callers need is_complete to tell this apart from "nobody scored"
        assert final_score(0, 0, None, _weights(0.4, 0.6, 0)) == 0.0

    def test_boss_score_without_boss_weight_is_ignored(self):
        assert final_score(80, 90, 10, _weights(0.5, 0.5, 0)) == pytest.approx(85.0)


class TestRequiredRaters:
    def test_only_weighted_raters_are_required(self):
        assert required_raters(_weights(0.4, 0.6, 0)) == [SELF, LEADER]
        assert required_raters(_weights(0.48, 0.32, 0.2)) == [SELF, LEADER, BOSS]


class TestScoreEvaluationSet:
    def test_self_and_leader_example(self, template_config):
        template = template_from_config(template_config())
        evaluation_set = EvaluationSet(
            self_scores=detailed_scores_from_payload(scores(delivery=(80, 90), teamwork=70)),
            leader_scores=detailed_scores_from_payload(scores(delivery=(90, 90), teamwork=80)),
        )

        breakdown = score_evaluation_set(template, evaluation_set)

        assert breakdown.rater_scores[SELF] == pytest.approx(79.0)
        assert breakdown.rater_scores[LEADER] == pytest.approx(86.0)
        assert breakdown.rater_scores[BOSS] is None
        assert breakdown.is_complete is True
        assert breakdown.missing_raters == []
        assert breakdown.final_score == pytest.approx(83.2)

        delivery = breakdown.categories[0]
        assert delivery.category_id == "delivery"
        assert delivery.rater_scores[SELF] == pytest.approx(85.0)
        assert delivery.rater_scores[LEADER] == pytest.approx(90.0)
        assert delivery.combined_score == pytest.approx(85 * 0.4 + 90 * 0.6)

    def test_incomplete_set_has_no_final_score(self, template_config):
        template = template_from_config(template_config())
        evaluation_set = EvaluationSet(
            self_scores=detailed_scores_from_payload(scores(delivery=(80, 90), teamwork=70)))

        breakdown = score_evaluation_set(template, evaluation_set)

        assert breakdown.is_complete is False
        assert breakdown.missing_raters == [LEADER]
        assert breakdown.final_score is None

    def test_partial_aggregation_scores_present_raters(self, template_config):
        template = template_from_config(template_config(allow_partial_aggregation=True))
        evaluation_set = EvaluationSet(
            self_scores=detailed_scores_from_payload(scores(delivery=(80, 90), teamwork=70)))

        breakdown = score_evaluation_set(template, evaluation_set)

        assert breakdown.is_complete is False
        assert breakdown.final_score == pytest.approx(79.0)

    def test_two_tier_template(self, template_config):
        template = template_from_config(template_config(scoring_rules={
            "scoring_mode": "two_tier_weighted",
            "two_tier_config": {
                "employee_leader_weight": 80,
                "boss_weight": 20,
                "self_weight_in_employee_leader": 60,
                "leader_weight_in_employee_leader": 40,
            },
        }))
        same = scores(delivery=(80, 80), teamwork=80)
        evaluation_set = EvaluationSet(
            self_scores=detailed_scores_from_payload(same),
            leader_scores=detailed_scores_from_payload(same),
        )

        breakdown = score_evaluation_set(template, evaluation_set)

        assert breakdown.missing_raters == [BOSS]
        assert breakdown.final_score is None


@pytest.mark.parametrize("score,label", [
    (95, "Excellent"), (90, "Excellent"), (85, "Good"), (70, "Qualified"),
    (69.99, "Needs improvement"), (None, ""),
])
def test_score_level(score, label):
    assert score_level(score) == label
