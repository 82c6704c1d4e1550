# guardian/dashboard/__init__.py
from .routes import dashboard_bp

__all__ = ["dashboard_bp"]
