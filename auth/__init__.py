"""
auth — User authentication module.

Provides:
  • Password hashing and verification (bcrypt, configurable work factor)
  • Signed, expiring token creation & verification (HMAC-SHA256)
  • ``AuthService`` — register / login business rules
  • Register / Login API routes
  • ``get_current_user_id`` FastAPI dependency
"""
