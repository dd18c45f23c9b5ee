from django.core.management.base import BaseCommand, CommandError

from review_app.models import Assessment, AssessmentParticipant
from review_app.services.review_math import calculate_participant_score
from review_app.services.scoring_types import TemplateConfigError


class Command(BaseCommand):
    help = "Recompute and store the final score of every assessment participant."

    def add_arguments(self, parser):
        parser.add_argument("--assessment", help="Only recompute this assessment (id).")

    def handle(self, *args, **options):
        assessments = Assessment.objects.all()
        if options["assessment"]:
            assessments = assessments.filter(pk=options["assessment"])
            if not assessments.exists():
                raise CommandError(f"Assessment {options['assessment']} not found.")

        count = 0
        for assessment in assessments.select_related("template"):
            participants = AssessmentParticipant.objects.filter(assessment=assessment).select_related("user")
            try:
                for participant in participants:
                    calculate_participant_score(assessment, participant.user, persist=True)
                    count += 1
            except TemplateConfigError as e:
                self.stderr.write(self.style.WARNING(f"Skipped {assessment}: {e}"))

        self.stdout.write(self.style.SUCCESS(f"Recomputed {count} participant scores."))
