from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend
from django.db import transaction
from django.db.models import ProtectedError

from review_app.filters import TemplateFilter
from review_app.models import Template
from review_app.permissions import ReadOnlyOrAdmin
from review_app.serializers.scoring_serializer import ScorePreviewSerializer, TemplateConfigSerializer
from review_app.serializers.template_serializer import TemplateSerializer
from review_app.services.assessment_service import template_config_errors
from review_app.services.category_math import category_scores
from review_app.services.final_score_math import final_score, score_evaluation_set
from review_app.services.review_math import _round2, breakdown_to_dict
from review_app.services.score_validation import validate_detailed_scores
from review_app.services.scoring_types import (
    BOSS, LEADER, SELF, EvaluationSet, TemplateConfigError,
    detailed_scores_from_payload, template_from_config,
)


class TemplateViewSet(viewsets.ModelViewSet):
    """
    • GET    /templates/                    → list (filters: name, type, is_default, is_active)
    • POST   /templates/                    → create (admin)
    • POST   /templates/validate/           → {valid, errors} for an unsaved config
    • POST   /templates/{id}/set-default/   → make this the default of its type (admin)
    • POST   /templates/{id}/score-preview/ → live scores for up to three raters
    """
    queryset = Template.objects.select_related("created_by")
    serializer_class = TemplateSerializer
    permission_classes = [ReadOnlyOrAdmin]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = TemplateFilter
    search_fields = ["name", "description"]
    ordering_fields = ["created_at", "updated_at", "name"]

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            self.perform_destroy(instance)
        except ProtectedError:
            return Response({
                "error": "Template is used by assessments and cannot be deleted."
            }, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            "message": "Template deleted successfully."
        }, status=status.HTTP_204_NO_CONTENT)

    # Any authenticated user may validate; nothing is stored.
    @action(detail=False, methods=["post"], url_path="validate",
            permission_classes=[IsAuthenticated])
    def validate_config(self, request):
        serializer = TemplateConfigSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        errors = template_config_errors(serializer.validated_data["config"])
        return Response({"valid": not errors, "errors": errors}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        template = self.get_object()
        with transaction.atomic():
            Template.objects.filter(type=template.type, is_default=True).exclude(pk=template.pk).update(is_default=False)
            template.is_default = True
            template.save(update_fields=["is_default", "updated_at"])
        return Response({"message": "Default template updated."}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="score-preview",
            permission_classes=[IsAuthenticated])
    def score_preview(self, request, pk=None):
        instance = self.get_object()
        try:
            template = template_from_config(instance.config)
        except TemplateConfigError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        serializer = ScorePreviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        parsed, errors = {}, {}
        for rater in (SELF, LEADER, BOSS):
            parsed[rater] = _parsed(data.get(f"{rater}_scores"))
            problems = validate_detailed_scores(parsed[rater] or (), template, allow_unknown=True)
            if problems:
                errors[f"{rater}_scores"] = problems
        if errors:
            return Response(errors, status=status.HTTP_400_BAD_REQUEST)

        evaluation_set = EvaluationSet(
            self_scores=parsed[SELF],
            leader_scores=parsed[LEADER],
            boss_scores=parsed[BOSS],
        )
        breakdown = score_evaluation_set(template, evaluation_set)
        rater = breakdown.rater_scores

        response = breakdown_to_dict(breakdown)
        # what the form shows while raters are still missing
        response["partial_final_score"] = _round2(
            final_score(rater[SELF], rater[LEADER], rater[BOSS], breakdown.weights))
        response["category_scores"] = {
            r: {cid: _round2(v) for cid, v in category_scores(evaluation_set.for_rater(r) or (), template).items()}
            for r in (SELF, LEADER, BOSS)
        }
        return Response(response, status=status.HTTP_200_OK)


def _parsed(payload):
    if payload is None:
        return None
    return detailed_scores_from_payload(payload)
