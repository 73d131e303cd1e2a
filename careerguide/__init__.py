"""
Career Guidance Platform
Connects students, institutions, companies and administrators.

Architecture:
- Document store: MongoDB, or an in-memory store when no URI is configured
- JWT authentication with email verification
- SMTP relay for transactional email
"""

__version__ = "1.0.0"
