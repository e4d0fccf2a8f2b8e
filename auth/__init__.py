"""
auth — User authentication module.

Provides:
  • Password hashing (PBKDF2-SHA256 with per-user salt)
  • JWT session token issuance & verification
  • ``require_user`` FastAPI dependency for cookie-authenticated routes
"""
