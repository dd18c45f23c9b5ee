from django.db.models.signals import post_save
from django.dispatch import receiver

from review_app.models import Evaluation, EvaluationStatus
from review_app.services.review_math import calculate_participant_score


#-------------------------------------------
# Recompute the evaluatee's final score whenever a submitted evaluation is saved.
# Draft autosaves only touch the draft's own columns and are skipped.
@receiver(post_save, sender=Evaluation)
def _evaluation_saved(sender, instance: Evaluation, **kwargs):
    if instance.status != EvaluationStatus.SUBMITTED:
        return
    calculate_participant_score(instance.assessment, instance.evaluatee, persist=True)
