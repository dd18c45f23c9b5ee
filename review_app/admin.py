from django.contrib import admin
from . import models as m
from review_app.services.review_math import calculate_participant_score


# ───────────────────────────────
#  Inline helpers
# ───────────────────────────────
class ParticipantInline(admin.TabularInline):
    model = m.AssessmentParticipant
    extra = 0
    autocomplete_fields = ["user"]
    readonly_fields = ("self_score", "leader_score", "boss_score", "final_score", "is_complete")


# ───────────────────────────────
#  Template
# ───────────────────────────────
@admin.register(m.Template)
class TemplateAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "is_default", "is_active", "created_at")
    list_filter = ("type", "is_default", "is_active")
    search_fields = ("name", "description")


def recompute_scores(modeladmin, request, queryset):
    count = 0
    for assessment in queryset:
        for participant in assessment.participant_set.select_related("user"):
            calculate_participant_score(assessment, participant.user, persist=True)
            count += 1
    modeladmin.message_user(request, f"Recomputed {count} participant scores.")
recompute_scores.short_description = "Recompute final scores"


# ───────────────────────────────
#  Assessment
# ───────────────────────────────
@admin.register(m.Assessment)
class AssessmentAdmin(admin.ModelAdmin):
    list_display = ("title", "period", "template", "status", "deadline", "published_at")
    list_filter = ("status", "period")
    search_fields = ("title", "period")
    readonly_fields = ("template_snapshot", "published_at")
    inlines = [ParticipantInline]
    actions = [recompute_scores]


# ───────────────────────────────
#  Evaluation
# ───────────────────────────────
@admin.register(m.Evaluation)
class EvaluationAdmin(admin.ModelAdmin):
    list_display = ("assessment", "evaluatee", "evaluator", "type", "status", "score", "submitted_at")
    list_filter = ("type", "status", "assessment")
    search_fields = ("evaluatee__name", "evaluator__name", "assessment__title")
    readonly_fields = ("content_hash", "submitted_at")
