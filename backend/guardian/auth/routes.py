# =============================================================================
# File: guardian/auth/routes.py
# Description: Account routes: registration, password login, social login
#   and the current-session lookup.
#
#   - POST /api/auth/register: public
#   - POST /api/auth/login: public
#   - POST /api/auth/google: public (identity already asserted by the provider)
#   - GET  /api/auth/me: any authenticated user
#
# Every account is created together with its trial Subscription row.
# =============================================================================

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from guardian.errors import BadRequest, DuplicateEmail, InvalidCredentials
from guardian.extensions import db
from guardian.models import User
from guardian.auth.decorators import require_auth, current_user
from guardian.auth.tokens import create_access_token
from guardian.scans.orchestrator import is_valid_email
from guardian.services import get_policy, json_body, now, str_field
from guardian.subscriptions.entitlement import normalize_email

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _find_user(email: str) -> User | None:
    return User.query.filter(func.lower(User.email) == email.lower()).first()


def _create_user(email: str, name: str | None, password_hash: str | None) -> User:
    """Insert a user plus its trial subscription; caller commits."""
    created = now()
    u = User(email=email, name=name or "", password_hash=password_hash, created_at=created, updated_at=created)
    db.session.add(u)
    db.session.flush()  # Get user ID

    db.session.add(get_policy().new_trial(u.id, created))
    return u


def _session_payload(u: User) -> dict:
    token = create_access_token(
        secret_key=current_app.config["GUARDIAN"].secret_key, user_id=u.id, email=u.email
    )
    return {
        "user": u.to_ui(),
        "token": token,
        "subscription": get_policy().view(u.email, u.subscription, now()),
    }


@auth_bp.post("/register")
def register():
    body = json_body()
    email = normalize_email(str_field(body, "email"))
    password = str_field(body, "password")
    name = str_field(body, "name").strip() or None

    if not email or not password:
        raise BadRequest("Email and password required")
    if not is_valid_email(email):
        raise BadRequest("Valid email required")

    if _find_user(email):
        raise DuplicateEmail("Email already registered")

    try:
        u = _create_user(email, name, generate_password_hash(password))
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same address
        db.session.rollback()
        raise DuplicateEmail("Email already registered")
    logger.info("Registered user %s", u.id)

    return jsonify(_session_payload(u)), 201


@auth_bp.post("/login")
def login():
    body = json_body()
    email = normalize_email(str_field(body, "email"))
    password = str_field(body, "password")

    if not email or not password:
        raise BadRequest("Email and password required")

    u = _find_user(email)
    if not u or not u.password_hash or not check_password_hash(u.password_hash, password):
        raise InvalidCredentials("Invalid credentials")

    return jsonify(_session_payload(u)), 200


@auth_bp.post("/google")
def social_login():
    body = json_body()
    email = normalize_email(str_field(body, "email"))
    name = str_field(body, "name").strip() or None

    if not email:
        raise BadRequest("Email required")
    if not is_valid_email(email):
        raise BadRequest("Valid email required")

    u = _find_user(email)
    if not u:
        try:
            u = _create_user(email, name, None)
            db.session.commit()
            logger.info("Created user %s via social login", u.id)
        except IntegrityError:
            db.session.rollback()
            u = _find_user(email)
            if u is None:
                raise

    return jsonify(_session_payload(u)), 200


@auth_bp.get("/me")
@require_auth
def me():
    u = current_user()
    return jsonify(
        user=u.to_ui(),
        subscription=get_policy().view(u.email, u.subscription, now()),
    ), 200
