# users/urls.py

"""
AUTH ROUTES (/api/auth/)

- register/, login/       email + password flows (anon, throttled)
- jwt/create/, jwt/refresh/  raw SimpleJWT pair endpoints
- me/                     current user (Bearer access token)
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .views import LoginView, MeView, RegisterView

app_name = "users"

urlpatterns = [
    path("register/", RegisterView.as_view(), name="register"),
    path("login/", LoginView.as_view(), name="login"),
    path("jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("me/", MeView.as_view(), name="me"),
]
