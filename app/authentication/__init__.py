"""
Authentication application.

User identity for the marketplace. Login itself is delegated to
SimpleJWT token endpoints; this app owns the user records that
messaging references by id.

Key components:
    - User model: Email-based login, UUID identifier
    - Profile model: Name parts and avatar URL
    - UserSummarySerializer: Public user representation embedded in messages

Usage:
    from authentication.models import User, Profile
"""
