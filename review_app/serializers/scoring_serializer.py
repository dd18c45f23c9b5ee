from rest_framework import serializers


class DetailedScoreItemSerializer(serializers.Serializer):
    itemId  = serializers.CharField()
    score   = serializers.FloatField()
    comment = serializers.CharField(allow_blank=True, required=False, default="")


class DetailedScoreSerializer(serializers.Serializer):
    """One rater's scores for one category, in the review form's wire shape."""
    categoryId    = serializers.CharField()
    categoryScore = serializers.FloatField(required=False, default=0.0)   # derived; recomputed server side
    items         = DetailedScoreItemSerializer(many=True)


class ScorePreviewSerializer(serializers.Serializer):
    """
    Scores of up to three raters against one template.
    • a missing / null rater is treated as not submitted.
    """
    self_scores   = DetailedScoreSerializer(many=True, required=False, allow_null=True)
    leader_scores = DetailedScoreSerializer(many=True, required=False, allow_null=True)
    boss_scores   = DetailedScoreSerializer(many=True, required=False, allow_null=True)


class TemplateConfigSerializer(serializers.Serializer):
    config = serializers.JSONField()
