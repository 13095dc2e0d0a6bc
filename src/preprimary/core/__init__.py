"""Core business logic.

Modules:
- domain: enumerations and shared vocabulary
- auth: password hashing and access tokens
- access: role and ownership rules
- dashboard: statistics and recent activity
- photos: student photo upload to Cloudinary
- suggestions: AI teaching activity suggestions with offline fallback
"""

__all__ = [
    "domain",
    "auth",
    "access",
    "dashboard",
    "photos",
    "suggestions",
]
