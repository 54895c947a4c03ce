"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_services.py: AccountRegistry tests
- test_views.py: registration and referral-code endpoint tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_services.py
"""
