import django_filters as filters
from review_app.models import Template, Assessment, Evaluation


class TemplateFilter(filters.FilterSet):
    name       = filters.CharFilter(field_name="name", lookup_expr="icontains")
    type       = filters.CharFilter(field_name="type", lookup_expr="exact")
    is_default = filters.BooleanFilter(field_name="is_default")
    is_active  = filters.BooleanFilter(field_name="is_active")
    created_by = filters.UUIDFilter(field_name="created_by__user_id", lookup_expr="exact")

    class Meta:
        model = Template
        fields = ["name", "type", "is_default", "is_active", "created_by"]


class AssessmentFilter(filters.FilterSet):
    status = filters.CharFilter(field_name="status", lookup_expr="exact")  # use keys e.g. active
    period = filters.CharFilter(field_name="period", lookup_expr="exact")
    title  = filters.CharFilter(field_name="title", lookup_expr="icontains")

    class Meta:
        model = Assessment
        fields = ["status", "period", "title"]


class EvaluationFilter(filters.FilterSet):
    assessment_id = filters.UUIDFilter(field_name="assessment__assessment_id", lookup_expr="exact")
    evaluatee_id  = filters.UUIDFilter(field_name="evaluatee__user_id", lookup_expr="exact")
    evaluator_id  = filters.UUIDFilter(field_name="evaluator__user_id", lookup_expr="exact")
    type          = filters.CharFilter(field_name="type", lookup_expr="exact")
    status        = filters.CharFilter(field_name="status", lookup_expr="exact")

    class Meta:
        model = Evaluation
        fields = ["assessment_id", "evaluatee_id", "evaluator_id", "type", "status"]
