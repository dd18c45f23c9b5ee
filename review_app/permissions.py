from rest_framework.permissions import BasePermission, SAFE_METHODS
from review_app.models import EvaluatorType


def can_rate(user, evaluatee, evaluator_type):
    '''
    self   → only the evaluatee
    leader → only the evaluatee's direct leader
    boss   → any BOSS
    '''
    if evaluator_type == EvaluatorType.SELF:
        return evaluatee.pk == user.pk
    if evaluator_type == EvaluatorType.LEADER:
        return evaluatee.leader_id is not None and evaluatee.leader_id == user.pk
    if evaluator_type == EvaluatorType.BOSS:
        return user.role == "BOSS"
    return False


def can_view_results(user, evaluatee):
    if user.role in ("ADMIN", "BOSS"):
        return True
    return evaluatee.pk == user.pk or evaluatee.leader_id == user.pk


class IsAdmin(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "ADMIN"

class IsBoss(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "BOSS"

class IsLeader(BasePermission):
    def has_permission(self, request, view):
        return request.user.role == "LEADER"


class ReadOnlyOrAdmin(BasePermission):
    """
    - SAFE methods (GET / HEAD / OPTIONS) → any authenticated user.
    - Mutating methods (POST / PUT / PATCH / DELETE) → Admin only.
    """
    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.role == "ADMIN"


class IsEvaluatorOrAdmin(BasePermission):
    """
    Admin sees everything.
    The evaluator owns the evaluation. Once submitted it may also be read by
    whoever can see the evaluatee's results (the evaluatee, their leader, a boss).
    """
    def has_permission(self, request, view):
        return request.user and request.user.is_authenticated

    def has_object_permission(self, request, view, obj):
        user = request.user
        if user.role == "ADMIN":
            return True
        if obj.evaluator_id == user.pk:
            return True
        if request.method in SAFE_METHODS:
            return obj.is_submitted and can_view_results(user, obj.evaluatee)
        return False
