from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied
from django.conf import settings
from django.contrib.auth import get_user_model
from review_app.models import (
    Assessment, Evaluation, EvaluationStatus, EvaluatorType,
)
from review_app.permissions import can_rate
from review_app.serializers.scoring_serializer import DetailedScoreSerializer
from review_app.utils import LabelChoiceField

User = get_user_model()


class EvaluationSerializer(serializers.ModelSerializer):
    """
    Read shape of an evaluation.
    • Evaluator & evaluatee return brief info.
    • ``autosave_delay`` tells the form how long to wait after the last edit
      before it saves the draft again.
    """
    assessment_id = serializers.UUIDField(source="assessment.assessment_id", read_only=True)
    evaluator     = serializers.CharField(source="evaluator.name", read_only=True)
    evaluator_id  = serializers.UUIDField(source="evaluator.user_id", read_only=True)
    evaluatee     = serializers.CharField(source="evaluatee.name", read_only=True)
    evaluatee_id  = serializers.UUIDField(source="evaluatee.user_id", read_only=True)
    type          = LabelChoiceField(choices=EvaluatorType.choices, read_only=True)
    status        = LabelChoiceField(choices=EvaluationStatus.choices, read_only=True)
    autosave_delay = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Evaluation
        fields = [
            "evaluation_id",
            "assessment_id",
            "evaluator", "evaluator_id",
            "evaluatee", "evaluatee_id",
            "type", "status", "score",
            "detailed_scores",
            "review", "strengths", "improvements",
            "submitted_at", "created_at", "updated_at",
            "autosave_delay",
        ]
        read_only_fields = fields

    def get_autosave_delay(self, obj):
        return settings.REVIEW_AUTOSAVE_DELAY_SECONDS


class EvaluationDraftSerializer(serializers.Serializer):
    """Body of a draft save or a submit; every field optional."""
    detailed_scores = DetailedScoreSerializer(many=True, required=False)
    review          = serializers.CharField(allow_blank=True, required=False)
    strengths       = serializers.CharField(allow_blank=True, required=False)
    improvements    = serializers.CharField(allow_blank=True, required=False)


class EvaluationDraftCreateSerializer(EvaluationDraftSerializer):
    assessment_id = serializers.PrimaryKeyRelatedField(
        source="assessment",
        queryset=Assessment.objects.all(),
    )
    type = LabelChoiceField(choices=EvaluatorType.choices)
    # defaults to the caller for self evaluations
    evaluatee_id = serializers.PrimaryKeyRelatedField(
        source="evaluatee",
        queryset=User.objects.all(),
        required=False,
    )

    def validate(self, attrs):
        user = self.context["request"].user
        assessment = attrs["assessment"]
        evaluator_type = attrs["type"]
        evaluatee = attrs.get("evaluatee")
        if evaluatee is None:
            if evaluator_type != EvaluatorType.SELF:
                raise serializers.ValidationError({"evaluatee_id": "This field is required."})
            evaluatee = attrs["evaluatee"] = user

        if not can_rate(user, evaluatee, evaluator_type):
            raise PermissionDenied(f"You cannot give a {evaluator_type} evaluation to this user.")

        if not assessment.participant_set.filter(user=evaluatee).exists():
            raise serializers.ValidationError({"evaluatee_id": "User is not a participant of this assessment."})

        if Evaluation.objects.filter(assessment=assessment, evaluatee=evaluatee, type=evaluator_type).exists():
            raise serializers.ValidationError(
                {"type": f"A {evaluator_type} evaluation already exists for this user."})
        return attrs
