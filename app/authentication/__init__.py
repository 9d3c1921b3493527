"""
Authentication application.

Provides the participant identity for the marketplace: email-based users,
display profiles and JWT token endpoints.

Key components:
    - User model: Custom email-based user authentication
    - Profile model: Display names used by chat summaries
    - CurrentUserView: /api/v1/auth/me/

Usage:
    from authentication.models import User, Profile
"""
