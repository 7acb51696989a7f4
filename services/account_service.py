import secrets
from datetime import datetime

from flask import current_app
from sqlalchemy import or_

from extensions import db, notifier
from models.expenses import Expense
from models.family import FamilyLink, FamilyMemberRequest
from models.users import DEFAULT_CATEGORIES, User
from services.errors import AlreadyExists, NotFound, Unauthorized, ValidationError
from utils.db_helpers import atomic, normalize_email


class AccountService:
    """Account lifecycle: signup, login checks, profile, password, deletion."""

    @staticmethod
    def create_user(email, password, name=None):
        email = normalize_email(email)
        if User.query.filter_by(email=email).first():
            raise AlreadyExists()

        with atomic('signup'):
            user = User(email=email, name=(name or '').strip(), is_active=True)
            user.set_password(password)
            user.set_categories(DEFAULT_CATEGORIES)
            db.session.add(user)

        current_app.logger.info(f'New account {user.id} ({email})')
        return user

    @staticmethod
    def authenticate(email, password):
        """Return the user for valid credentials or raise ``Unauthorized``.

        Failed attempts count towards the lockout configured by
        MAX_LOGIN_ATTEMPTS / LOCKOUT_DURATION.
        """
        user = User.query.filter_by(email=normalize_email(email)).first()
        if user is None:
            # Same message as a bad password to prevent user enumeration
            raise Unauthorized('Invalid email or password.')

        if user.is_locked():
            minutes_left = int((user.locked_until - datetime.utcnow()).total_seconds() / 60) + 1
            raise Unauthorized(
                f'Account temporarily locked due to multiple failed login attempts. '
                f'Try again in {minutes_left} minutes.'
            )
        if not user.is_active:
            raise Unauthorized('This account has been deactivated. Please contact support.')

        if not user.check_password(password):
            user.record_failed_login()
            current_app.logger.warning(f'Failed login for user {user.id}')
            raise Unauthorized('Invalid email or password.')

        user.reset_failed_logins()
        user.update_last_login()
        return user

    @staticmethod
    def update_profile(user_id, email=None, name=None, gender=None, location=None, website=None):
        user = AccountService._get(user_id)
        new_email = normalize_email(email) if email else user.email
        if new_email != user.email and User.query.filter_by(email=new_email).first():
            raise AlreadyExists('The email address you have entered is already associated with an account.')

        with atomic('update profile'):
            user.email = new_email
            user.name = (name or '').strip()
            user.gender = (gender or '').strip()
            user.location = (location or '').strip()
            user.website = (website or '').strip()
        return user

    @staticmethod
    def update_categories(user_id, categories):
        user = AccountService._get(user_id)
        with atomic('update categories'):
            user.set_categories(categories)
        return user

    @staticmethod
    def change_password(user_id, password):
        user = AccountService._get(user_id)
        with atomic('change password'):
            user.set_password(password)
        current_app.logger.info(f'Password changed for user {user_id}')
        return user

    # ------------------------------------------------------------------
    # Password reset
    # ------------------------------------------------------------------

    @staticmethod
    def start_password_reset(email, base_url):
        """Store a one-hour reset token for *email* and mail the link."""
        user = User.query.filter_by(email=normalize_email(email)).first()
        if user is None:
            raise NotFound()

        token = secrets.token_hex(16)
        with atomic('start password reset'):
            user.password_reset_token = token
            user.password_reset_expires = (
                datetime.utcnow() + current_app.config['PASSWORD_RESET_EXPIRY']
            )

        notifier.notify(
            user.email,
            'Reset your password on Spendlist',
            'You are receiving this email because you (or someone else) have requested '
            'the reset of the password for your account.\n\n'
            'Please click on the following link, or paste this into your browser to '
            'complete the process:\n\n'
            f'{base_url.rstrip("/")}/reset/{token}\n\n'
            'If you did not request this, please ignore this email and your password '
            'will remain unchanged.\n',
        )
        return token

    @staticmethod
    def complete_password_reset(token, password):
        user = None
        if token:
            user = (
                User.query
                .filter_by(password_reset_token=token)
                .filter(User.password_reset_expires > datetime.utcnow())
                .first()
            )
        if user is None:
            raise ValidationError('Password reset token is invalid or has expired.')

        with atomic('complete password reset'):
            user.set_password(password)
            user.password_reset_token = None
            user.password_reset_expires = None
            user.failed_login_attempts = 0
            user.locked_until = None

        notifier.notify(
            user.email,
            'Your Spendlist password has been changed',
            f'Hello,\n\nThis is a confirmation that the password for your account '
            f'{user.email} has just been changed.\n',
        )
        return user

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    @staticmethod
    def delete_account(user_id):
        """Delete the user, their expenses, and every relationship row naming them."""
        user = AccountService._get(user_id)

        with atomic('delete account'):
            links = FamilyLink.query.filter(
                or_(FamilyLink.user_id == user_id, FamilyLink.member_id == user_id)
            ).delete(synchronize_session=False)
            requests = FamilyMemberRequest.query.filter(
                or_(FamilyMemberRequest.owner_id == user_id,
                    FamilyMemberRequest.requester_id == user_id)
            ).delete(synchronize_session=False)
            expenses = Expense.query.filter_by(user_id=user_id).delete(synchronize_session=False)
            db.session.delete(user)

        current_app.logger.info(
            f'Deleted account {user_id}: {links} link rows, {requests} requests, {expenses} expenses'
        )

    @staticmethod
    def _get(user_id):
        user = db.session.get(User, user_id)
        if user is None:
            raise Unauthorized()
        return user
