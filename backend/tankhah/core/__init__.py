"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on first run
- db: Database configuration, connection management and the "backend configured" flag
- security: Password hashing and JWT tokens
"""
