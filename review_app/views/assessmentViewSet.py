import logging
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django_filters.rest_framework import DjangoFilterBackend
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q

from review_app.filters import AssessmentFilter
from review_app.models import Assessment
from review_app.permissions import IsAdmin, IsBoss, ReadOnlyOrAdmin
from review_app.serializers.assessment_serializer import AssessmentSerializer
from review_app.services.assessment_service import (
    assessment_status, end_assessment, publish_assessment,
)
from review_app.services.review_math import breakdown_to_dict, calculate_participant_score
from review_app.services.scoring_types import TemplateConfigError
from review_app.utils import validation_error_detail

logger = logging.getLogger(__name__)


class AssessmentViewSet(viewsets.ModelViewSet):
    """
    Permissions
    -----------
    • ADMIN           → full CRUD, publish / end.
    • BOSS            → read everything, score preview.
    • LEADER / EMP    → read assessments they take part in or whose
                        participants they lead.
    """
    serializer_class = AssessmentSerializer
    permission_classes = [ReadOnlyOrAdmin]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AssessmentFilter
    search_fields = ["title", "period"]
    ordering_fields = ["created_at", "deadline", "title"]

    def get_queryset(self):
        qs = (Assessment.objects
              .select_related("template")
              .prefetch_related("participant_set__user"))
        user = self.request.user
        if user.role in ("ADMIN", "BOSS"):
            return qs
        return qs.filter(
            Q(participant_set__user=user) | Q(participant_set__user__leader=user)
        ).distinct()

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.evaluations.exists():
            return Response({
                "error": "Assessment already has evaluations and cannot be deleted."
            }, status=status.HTTP_400_BAD_REQUEST)
        self.perform_destroy(instance)
        return Response({
            "message": "Assessment deleted successfully."
        }, status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        assessment = self.get_object()
        try:
            publish_assessment(assessment)
        except DjangoValidationError as e:
            logger.warning(f"Assessment {assessment.pk} not published: {e}")
            return Response(validation_error_detail(e), status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(assessment).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def end(self, request, pk=None):
        assessment = self.get_object()
        try:
            end_assessment(assessment)
        except DjangoValidationError as e:
            return Response(validation_error_detail(e), status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(assessment).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="status",
            permission_classes=[IsAuthenticated])
    def scoring_status(self, request, pk=None):
        return Response(assessment_status(self.get_object()), status=status.HTTP_200_OK)

    @action(detail=True, methods=["get"], url_path="score-preview",
            permission_classes=[IsAdmin | IsBoss])
    def score_preview(self, request, pk=None):
        """
        Final score of every participant, computed on the fly.
        ?include_drafts=true also counts evaluations that are not submitted yet.
        """
        assessment = self.get_object()
        include_drafts = request.query_params.get("include_drafts", "").lower() in ("1", "true", "yes")

        rows = []
        try:
            for participant in assessment.participant_set.select_related("user"):
                breakdown = calculate_participant_score(
                    assessment, participant.user, submitted_only=not include_drafts)
                rows.append({
                    "user_id": participant.user.user_id,
                    "user_name": participant.user.name,
                    **breakdown_to_dict(breakdown),
                })
        except TemplateConfigError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response({
            "assessment_id": assessment.assessment_id,
            "participants": rows,
        }, status=status.HTTP_200_OK)
