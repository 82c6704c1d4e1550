from __future__ import annotations

from datetime import datetime, timezone
from sqlalchemy import UniqueConstraint
from .extensions import db


def now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_z(value: datetime | None) -> str | None:
    """Render a naive UTC datetime the way the API exposes timestamps."""
    return value.isoformat() + "Z" if value else None


class User(db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(120), nullable=True)
    # Null for accounts created through social login
    password_hash = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    subscription = db.relationship(
        "Subscription", uselist=False, back_populates="user", cascade="all, delete-orphan"
    )

    def to_ui(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name or ""}


class Subscription(db.Model):
    __tablename__ = "subscription"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    # status: trialing, active, canceled, past_due, incomplete, unpaid ...
    status = db.Column(db.String(30), nullable=False, default="trialing")
    trial_ends_at = db.Column(db.DateTime, nullable=True)
    current_period_end = db.Column(db.DateTime, nullable=True)
    plan = db.Column(db.String(50), nullable=True, default="free")

    stripe_customer_id = db.Column(db.String(255), nullable=True)
    stripe_subscription_id = db.Column(db.String(255), nullable=True)

    # Creation time of the newest billing event applied to this row
    last_event_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime, nullable=False, default=now_utc, onupdate=now_utc)

    user = db.relationship("User", back_populates="subscription")


class ScanResult(db.Model):
    """One breach hit for one (user, email) pair. Append-only."""
    __tablename__ = "scan_result"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    breach_name = db.Column(db.String(255), nullable=True)
    breach_domain = db.Column(db.String(255), nullable=True)
    breach_date = db.Column(db.String(50), nullable=True)
    breach_description = db.Column(db.Text, nullable=True)
    data_classes = db.Column(db.Text, nullable=True)
    severity = db.Column(db.String(20), nullable=True)  # low, medium, high
    source = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)

    user = db.relationship("User", backref=db.backref("scan_results", cascade="all, delete-orphan", lazy="dynamic"))


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)  # scan_own, scan_search, scan_monitor
    email_scanned = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_utc, index=True)


class MonitoredEmail(db.Model):
    __tablename__ = "monitored_email"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    last_checked_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=now_utc)

    user = db.relationship("User", backref=db.backref("monitored_emails", cascade="all, delete-orphan"))

    __table_args__ = (
        UniqueConstraint("user_id", "email", name="uq_monitored_email_user_email"),
    )
