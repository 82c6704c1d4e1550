# guardian/billing/__init__.py
from .routes import billing_bp, webhooks_bp

__all__ = ["billing_bp", "webhooks_bp"]
