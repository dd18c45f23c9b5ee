import uuid
from django.db import models
from django.utils import timezone
from django.conf import settings

from review_app.services.scoring_types import template_from_config

# ── Lookup / Enum helpers ────────────────────────────────────────────────

class TemplateType(models.TextChoices):
    ASSESSMENT = "assessment", "Assessment"
    EVALUATION = "evaluation", "Evaluation"
    OKR        = "okr",        "OKR"

class AssessmentStatus(models.TextChoices):
    DRAFT     = "draft",     "Draft"
    ACTIVE    = "active",    "Active"
    COMPLETED = "completed", "Completed"
    ENDED     = "ended",     "Ended"

class EvaluatorType(models.TextChoices):
    SELF   = "self",   "Self"
    LEADER = "leader", "Leader"
    BOSS   = "boss",   "Boss"

class EvaluationStatus(models.TextChoices):
    DRAFT     = "draft",     "Draft"
    SUBMITTED = "submitted", "Submitted"


# ── Templates ────────────────────────────────────────────────────────────
class Template(models.Model):
    template_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name        = models.CharField(max_length=180)
    description = models.TextField(blank=True)
    type        = models.CharField(max_length=12, choices=TemplateType.choices, default=TemplateType.ASSESSMENT)
    config      = models.JSONField(default=dict)   # categories / items / scoring_rules
    is_default  = models.BooleanField(default=False)
    is_active   = models.BooleanField(default=True)
    created_by  = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="templates")
    created_at  = models.DateTimeField(default=timezone.now)
    updated_at  = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


# ── Assessment cycles ────────────────────────────────────────────────────
class Assessment(models.Model):
    assessment_id     = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title             = models.CharField(max_length=200)
    period            = models.CharField(max_length=20)      # e.g. '2025-H1'
    description       = models.TextField(blank=True)
    template          = models.ForeignKey(Template, on_delete=models.PROTECT, related_name="assessments")
    # frozen copy of template.config taken at publish time
    template_snapshot = models.JSONField(null=True, blank=True)
    status            = models.CharField(max_length=10, choices=AssessmentStatus.choices, default=AssessmentStatus.DRAFT)
    start_date        = models.DateField(null=True, blank=True)
    end_date          = models.DateField(null=True, blank=True)
    deadline          = models.DateField(null=True, blank=True)
    participants      = models.ManyToManyField(settings.AUTH_USER_MODEL, through="AssessmentParticipant", related_name="assessments")
    created_by        = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="created_assessments")
    published_at      = models.DateTimeField(null=True, blank=True)
    created_at        = models.DateTimeField(default=timezone.now)
    updated_at        = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.period})"

    @property
    def is_open_for_scoring(self):
        return self.status == AssessmentStatus.ACTIVE

    def scoring_config(self):
        """Config the scores of this assessment are computed against."""
        if self.template_snapshot is not None:
            return self.template_snapshot
        return self.template.config

    def scoring_template(self):
        return template_from_config(self.scoring_config())


class AssessmentParticipant(models.Model):
    """One employee in one cycle, with the persisted scores."""
    participant_id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment     = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name="participant_set")
    user           = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="participations")
    self_score     = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    leader_score   = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    boss_score     = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    final_score    = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    is_complete    = models.BooleanField(default=False)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["assessment", "user"], name="uniq_participant_per_assessment")
        ]


# ── Evaluations ──────────────────────────────────────────────────────────
class Evaluation(models.Model):
    evaluation_id   = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assessment      = models.ForeignKey(Assessment, on_delete=models.CASCADE, related_name="evaluations")
    evaluator       = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="given_evaluations")
    evaluatee       = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="received_evaluations")
    type            = models.CharField(max_length=10, choices=EvaluatorType.choices)
    status          = models.CharField(max_length=10, choices=EvaluationStatus.choices, default=EvaluationStatus.DRAFT)
    detailed_scores = models.JSONField(default=list, blank=True)   # [{categoryId, categoryScore, items:[...]}]
    score           = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    review          = models.TextField(blank=True)
    strengths       = models.TextField(blank=True)
    improvements    = models.TextField(blank=True)
    content_hash    = models.CharField(max_length=64, blank=True)
    submitted_at    = models.DateTimeField(null=True, blank=True)
    created_at      = models.DateTimeField(default=timezone.now)
    updated_at      = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["assessment", "evaluatee", "type"], name="uniq_evaluation_per_rater_type")
        ]

    @property
    def is_submitted(self):
        return self.status == EvaluationStatus.SUBMITTED
