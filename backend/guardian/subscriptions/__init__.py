# guardian/subscriptions/__init__.py
"""
Subscription module: trial/premium entitlement.

Components:
    entitlement.py: SubscriptionPolicy state machine (pure, clock injected)
    routes.py     : GET /api/subscription

The app factory imports subscriptions_bp from routes directly.
"""
