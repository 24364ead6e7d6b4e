"""
USER AUTH VIEWS

- Register (anon): creates a staff-role user
- Login (anon): email + password -> SimpleJWT access/refresh pair
- Targeted throttling for both
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import generics, serializers, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import LoginSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


# ---------------- THROTTLES (TARGETED) ----------------
class RegisterAnonThrottle(AnonRateThrottle):
    """
    Anonymous registration throttling.
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['anon'].
    """

    scope = "anon"


class LoginAnonThrottle(AnonRateThrottle):
    """
    Anonymous login throttling.
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['anon'].
    """

    scope = "anon"


class LoginResponseSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()


# ---------------- REGISTER ----------------
class RegisterView(generics.GenericAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [RegisterAnonThrottle]

    @extend_schema(
        request=RegisterSerializer,
        responses={201: UserSerializer},
        description="Register a new user account",
    )
    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("user.registered", extra={"user_id": str(user.id)})

        return Response(
            {
                "message": "User registered successfully",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ---------------- LOGIN (JWT + EMAIL) ----------------
class LoginView(generics.GenericAPIView):
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [LoginAnonThrottle]

    @extend_schema(
        request=LoginSerializer,
        responses={200: LoginResponseSerializer},
        description="Authenticate with email and password and receive a JWT pair",
    )
    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data["email"]
        password = serializer.validated_data["password"]

        user = User.objects.filter(email__iexact=email).first()

        if user is None or not user.check_password(password):
            logger.warning("user.login_failed", extra={"email": email})
            return Response(
                {"detail": "Invalid email or password"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        if not user.is_active:
            return Response(
                {"detail": "User account is disabled"},
                status=status.HTTP_403_FORBIDDEN,
            )

        refresh = RefreshToken.for_user(user)
        refresh["email"] = user.email
        refresh["role"] = user.role

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )
