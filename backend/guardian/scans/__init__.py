# guardian/scans/__init__.py
from .routes import scans_bp

__all__ = ["scans_bp"]
