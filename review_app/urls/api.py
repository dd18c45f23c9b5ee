# review_app/urls/api.py
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from review_app.views.auth import EmailLoginView
from review_app.views.templateViewSet import TemplateViewSet
from review_app.views.assessmentViewSet import AssessmentViewSet
from review_app.views.evaluationViewSet import EvaluationViewSet

router = DefaultRouter()
router.register("templates", TemplateViewSet, basename="template")        # /api/templates/
router.register("assessments", AssessmentViewSet, basename="assessment")  # /api/assessments/
router.register("evaluations", EvaluationViewSet, basename="evaluation")  # /api/evaluations/

urlpatterns = [
    # JWT
    path("auth/login/",   EmailLoginView.as_view(),   name="jwt-login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    *router.urls,
]
