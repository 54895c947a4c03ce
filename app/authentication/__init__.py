"""
Authentication application.

Identity for the billing service: the email-based User model and the
AccountRegistry that registers users and provisions their billing Account.

Usage:
    from authentication.models import User
    from authentication.services import AccountRegistry
"""
