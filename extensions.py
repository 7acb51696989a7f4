"""
Flask extension instances.

Created here without an app and bound in ``create_app`` via ``init_app`` so
that models, services and blueprints can import them without cycles.
"""
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_mail import Mail
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from services.notification_service import Notifier
from services.token_service import TokenIssuer

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
mail = Mail()
limiter = Limiter(key_func=get_remote_address)

token_issuer = TokenIssuer()
notifier = Notifier(mail)
