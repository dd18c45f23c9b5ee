from rest_framework import status
from rest_framework.exceptions import APIException


class EvaluationLocked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This evaluation has been submitted and can no longer be changed."
    default_code = "evaluation_locked"


class AssessmentClosed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This assessment is not open for scoring."
    default_code = "assessment_closed"
