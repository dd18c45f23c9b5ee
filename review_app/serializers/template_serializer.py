from rest_framework import serializers
from review_app.models import Template, TemplateType
from review_app.utils import LabelChoiceField
from review_app.services.assessment_service import template_config_errors


class TemplateSerializer(serializers.ModelSerializer):
    """
    • ``config`` is checked on every write: shape first, then every weight
      partition. All problems come back together under ``config``.
    • ``summary`` / ``total_weight`` are read-only helpers for list screens.
    """
    type       = LabelChoiceField(choices=TemplateType.choices, required=False)
    created_by = serializers.CharField(source="created_by.name", read_only=True, default=None)
    summary    = serializers.SerializerMethodField(read_only=True)
    total_weight = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = Template
        fields = [
            "template_id",
            "name", "description", "type",
            "config",
            "is_default", "is_active",
            "created_by",
            "summary", "total_weight",
            "created_at", "updated_at",
        ]
        read_only_fields = ("template_id", "is_default", "created_at", "updated_at")

    def validate_config(self, value):
        errors = template_config_errors(value)
        if errors:
            raise serializers.ValidationError(errors)
        return value

    def get_summary(self, obj):
        categories = (obj.config or {}).get("categories") or []
        items = sum(len(c.get("items") or []) for c in categories)
        return f"{len(categories)} categories, {items} items"

    def get_total_weight(self, obj):
        categories = (obj.config or {}).get("categories") or []
        return sum(c.get("weight") or 0 for c in categories)
