# guardian/audit/__init__.py
from .routes import audit_bp, log_audit

__all__ = ["audit_bp", "log_audit"]
