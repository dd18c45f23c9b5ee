import logging
from dataclasses import asdict

from rest_framework import viewsets, mixins, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.exceptions import PermissionDenied
from django_filters.rest_framework import DjangoFilterBackend
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.shortcuts import get_object_or_404

from review_app.filters import EvaluationFilter
from review_app.models import Assessment, Evaluation, EvaluationStatus, EvaluatorType
from review_app.permissions import IsEvaluatorOrAdmin, can_view_results
from review_app.serializers.evaluation_serializer import (
    EvaluationDraftCreateSerializer, EvaluationDraftSerializer, EvaluationSerializer,
)
from review_app.services.comparison import category_diffs, flag_large_differences, item_diffs
from review_app.services.draft_service import create_draft, save_draft, submit_evaluation
from review_app.services.review_math import breakdown_to_dict, evaluation_set_for
from review_app.services.final_score_math import score_evaluation_set
from review_app.services.score_validation import missing_items
from review_app.services.scoring_types import (
    BOSS, LEADER, SELF, TemplateConfigError, detailed_scores_from_payload,
)
from review_app.utils import validation_error_detail

logger = logging.getLogger(__name__)
User = get_user_model()


class EvaluationViewSet(mixins.ListModelMixin,
                        mixins.RetrieveModelMixin,
                        viewsets.GenericViewSet):
    """
    Evaluations are never created or edited through plain CRUD; raters go
    through the draft / submit actions.

    • POST /evaluations/draft/                          → start a draft
    • PUT  /evaluations/{id}/draft/                     → autosave a draft
    • POST /evaluations/{id}/submit/                    → submit (final)
    • GET  /evaluations/template/{assessment_id}/       → categories the caller rates
    • GET  /evaluations/comparison/{assessment_id}/{user_id}/ → self vs leader (vs boss)
    """
    serializer_class = EvaluationSerializer
    permission_classes = [IsEvaluatorOrAdmin]

    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = EvaluationFilter
    ordering_fields = ["created_at", "updated_at", "submitted_at", "score"]

    def get_queryset(self):
        qs = Evaluation.objects.select_related("assessment", "evaluator", "evaluatee")
        user = self.request.user
        if user.role == "ADMIN":
            return qs
        submitted = Q(status=EvaluationStatus.SUBMITTED)
        if user.role == "BOSS":
            return qs.filter(Q(evaluator=user) | submitted)
        return qs.filter(
            Q(evaluator=user)
            | (submitted & (Q(evaluatee=user) | Q(evaluatee__leader=user)))
        )

    # ── draft lifecycle ──────────────────────────────────────────────────
    @action(detail=False, methods=["post"], url_path="draft")
    def start_draft(self, request):
        serializer = EvaluationDraftCreateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        assessment = data.pop("assessment")
        evaluatee = data.pop("evaluatee")
        evaluator_type = data.pop("type")
        try:
            evaluation = create_draft(assessment, request.user, evaluatee, evaluator_type, request.data)
        except (DjangoValidationError, TemplateConfigError) as e:
            return Response(_error_detail(e), status=status.HTTP_400_BAD_REQUEST)
        return Response(EvaluationSerializer(evaluation).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["put"], url_path="draft")
    def autosave_draft(self, request, pk=None):
        evaluation = self.get_object()
        serializer = EvaluationDraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            evaluation, changed = save_draft(evaluation, request.data)
        except (DjangoValidationError, TemplateConfigError) as e:
            return Response(_error_detail(e), status=status.HTTP_400_BAD_REQUEST)
        return Response({
            "changed": changed,
            "evaluation": EvaluationSerializer(evaluation).data,
        }, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        evaluation = self.get_object()
        if evaluation.evaluator_id != request.user.pk:
            raise PermissionDenied("Only the evaluator can submit this evaluation.")
        serializer = EvaluationDraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            evaluation = submit_evaluation(evaluation, request.data)
        except (DjangoValidationError, TemplateConfigError) as e:
            logger.info(f"Submit of evaluation {evaluation.pk} rejected: {e}")
            return Response(_error_detail(e), status=status.HTTP_400_BAD_REQUEST)
        return Response(EvaluationSerializer(evaluation).data, status=status.HTTP_200_OK)

    # ── read helpers for the review form ─────────────────────────────────
    @action(detail=False, methods=["get"], url_path=r"template/(?P<assessment_id>[^/.]+)")
    def evaluator_template(self, request, assessment_id=None):
        """
        Categories of the assessment's template that ?type= (default self)
        rates, plus the caller's existing evaluation for ?evaluatee_id= if any.
        """
        assessment = get_object_or_404(Assessment, pk=assessment_id)
        evaluator_type = request.query_params.get("type", SELF).lower()
        if evaluator_type not in EvaluatorType.values:
            return Response({"type": f"Unknown evaluator type: {evaluator_type}"},
                            status=status.HTTP_400_BAD_REQUEST)

        try:
            template = assessment.scoring_template()
        except TemplateConfigError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        config = assessment.scoring_config()

        rated = {c.id for c in template.categories_for(evaluator_type)}
        categories = [c for c in config.get("categories") or [] if str(c.get("id")) in rated]

        evaluatee_id = request.query_params.get("evaluatee_id") or request.user.pk
        try:
            evaluation = Evaluation.objects.filter(
                assessment=assessment, evaluatee_id=evaluatee_id,
                type=evaluator_type, evaluator=request.user,
            ).first()
        except DjangoValidationError:
            return Response({"evaluatee_id": "Not a valid user id."}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "assessment_id": assessment.assessment_id,
            "type": evaluator_type,
            "can_evaluate": assessment.is_open_for_scoring,
            "categories": categories,
            "scoring_rules": config.get("scoring_rules") or {},
            "evaluation": EvaluationSerializer(evaluation).data if evaluation else None,
            "missing_items": missing_items(
                detailed_scores_from_payload(evaluation.detailed_scores) if evaluation else (),
                template, evaluator_type,
            ),
            "autosave_delay": settings.REVIEW_AUTOSAVE_DELAY_SECONDS,
        }, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"],
            url_path=r"comparison/(?P<assessment_id>[^/.]+)/(?P<user_id>[^/.]+)")
    def comparison(self, request, assessment_id=None, user_id=None):
        assessment = get_object_or_404(Assessment, pk=assessment_id)
        evaluatee = get_object_or_404(User, pk=user_id)
        if not can_view_results(request.user, evaluatee):
            raise PermissionDenied("You cannot view this employee's results.")

        try:
            template = assessment.scoring_template()
        except TemplateConfigError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        evaluation_set = evaluation_set_for(assessment, evaluatee)
        pairs = [(SELF, LEADER)]
        if evaluation_set.boss_scores is not None:
            pairs.append((LEADER, BOSS))

        comparisons = []
        for base, other in pairs:
            cats = category_diffs(evaluation_set.for_rater(base), evaluation_set.for_rater(other), template)
            items = item_diffs(evaluation_set.for_rater(base), evaluation_set.for_rater(other), template)
            flat_items = [row for group in items for row in group.items]
            comparisons.append({
                "base": base,
                "other": other,
                "categories": [asdict(d) for d in cats],
                "items": [asdict(g) for g in items],
                "large_category_differences": [
                    d.category_id for d in
                    flag_large_differences(cats, settings.REVIEW_CATEGORY_DIFF_THRESHOLD)
                ],
                "large_item_differences": [
                    d.item_id for d in
                    flag_large_differences(flat_items, settings.REVIEW_ITEM_DIFF_THRESHOLD)
                ],
            })

        return Response({
            "assessment_id": assessment.assessment_id,
            "user_id": evaluatee.user_id,
            "user_name": evaluatee.name,
            "score": breakdown_to_dict(score_evaluation_set(template, evaluation_set)),
            "comparisons": comparisons,
        }, status=status.HTTP_200_OK)


def _error_detail(error):
    if isinstance(error, TemplateConfigError):
        return {"error": str(error)}
    return validation_error_detail(error)
