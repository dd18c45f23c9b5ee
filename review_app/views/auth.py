from rest_framework_simplejwt.views import TokenObtainPairView
from review_app.serializers.auth_serializer import EmailLoginSerializer


class EmailLoginView(TokenObtainPairView):
    serializer_class = EmailLoginSerializer
