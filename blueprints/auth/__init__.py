from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

# Public routes: signup, login and password reset need no token

from . import routes  # noqa: E402,F401
