# users/views/__init__.py

from .auth import LoginView, RegisterView
from .me import MeView

__all__ = [
    "LoginView",
    "MeView",
    "RegisterView",
]
