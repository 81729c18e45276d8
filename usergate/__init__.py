"""usergate: user registration, login and role-gated user management over HTTP."""

__version__ = "0.1.0"
