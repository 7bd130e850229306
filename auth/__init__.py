"""
auth — User authentication module.

Provides:
  • bcrypt password hashing (``PasswordHasher``)
  • JWT token creation & verification (``TokenService``)
  • Register / login / Google login / password reset flows (``AuthService``)
  • ``get_current_identity`` / ``get_current_user_id`` FastAPI dependencies
"""
