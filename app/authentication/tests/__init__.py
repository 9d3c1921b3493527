"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_models.py: User and Profile model tests
- test_signals.py: Profile creation on user save
- test_views.py: Token and current-user endpoints
"""
