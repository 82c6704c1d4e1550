# guardian/reputation/__init__.py
from .routes import reputation_bp

__all__ = ["reputation_bp"]
