# guardian/auth/__init__.py
from .routes import auth_bp

__all__ = ["auth_bp"]
