from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.db import transaction
from review_app.models import (
    Assessment, AssessmentParticipant, AssessmentStatus, Template,
)
from review_app.utils import LabelChoiceField

User = get_user_model()


class ParticipantSerializer(serializers.ModelSerializer):
    user_id   = serializers.UUIDField(source="user.user_id", read_only=True)
    user_name = serializers.CharField(source="user.name", read_only=True)

    class Meta:
        model = AssessmentParticipant
        fields = [
            "user_id", "user_name",
            "self_score", "leader_score", "boss_score",
            "final_score", "is_complete", "updated_at",
        ]
        read_only_fields = fields


class AssessmentSerializer(serializers.ModelSerializer):

    #--WRITE-ONLY--
    template_id = serializers.PrimaryKeyRelatedField(
        source="template",
        queryset=Template.objects.filter(is_active=True),
    )
    participant_ids = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        many=True,
        write_only=True,
        required=False,
    )

    template     = serializers.CharField(source="template.name", read_only=True)
    status       = LabelChoiceField(choices=AssessmentStatus.choices, read_only=True)
    participants = ParticipantSerializer(source="participant_set", many=True, read_only=True)

    class Meta:
        model = Assessment
        fields = [
            "assessment_id",
            "title", "period", "description",
            "template", "template_id",
            "status",
            "start_date", "end_date", "deadline",
            "participant_ids", "participants",
            "published_at", "created_at", "updated_at",
        ]
        read_only_fields = ("assessment_id", "published_at", "created_at", "updated_at")

    def validate(self, attrs):
        instance = self.instance
        if instance is not None and instance.status != AssessmentStatus.DRAFT:
            if "template" in attrs and attrs["template"] != instance.template:
                raise serializers.ValidationError(
                    {"template_id": "The template of a published assessment cannot be changed."})
            if "participant_ids" in attrs:
                raise serializers.ValidationError(
                    {"participant_ids": "Participants of a published assessment cannot be changed."})

        start, end = attrs.get("start_date"), attrs.get("end_date")
        if start and end and start > end:
            raise serializers.ValidationError({"end_date": "End date must be after start date."})
        return attrs

    # ── create / update helpers ──────────────────────────
    def _set_participants(self, assessment, users):
        AssessmentParticipant.objects.filter(assessment=assessment).exclude(user__in=users).delete()
        for user in users:
            AssessmentParticipant.objects.get_or_create(assessment=assessment, user=user)

    def create(self, validated_data):
        users = validated_data.pop("participant_ids", [])
        with transaction.atomic():
            assessment = super().create(validated_data)
            self._set_participants(assessment, users)
        return assessment

    def update(self, instance, validated_data):
        users = validated_data.pop("participant_ids", None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if users is not None:
                self._set_participants(instance, users)
        return instance
