import logging
from django.utils import timezone
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView
from .serializers import LoginSerializer, UserSerializer

logger = logging.getLogger("accounts")


class LoginView(TokenObtainPairView):
    """
    Handles user authentication and JWT token generation.

    Extends SimpleJWT's TokenObtainPairView so the response carries the
    serialized user next to the access/refresh pair, and records the
    last login timestamp.
    """

    serializer_class = LoginSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = serializer.validated_data["user"]
        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        refresh = RefreshToken.for_user(user)
        logger.info(f"User logged in: {user.username}")
        return Response({
            "tokens": {
                "refresh": str(refresh),
                "access": str(refresh.access_token),
            },
            "user": UserSerializer(user).data,
        })


class ProfileView(generics.RetrieveAPIView):
    """Returns the authenticated user's profile."""

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user
