"""
Authentication Routes
Signup, login (token issue) and password reset
"""
from flask import current_app, jsonify, request

from . import auth_bp
from .forms import ForgotPasswordForm, LoginForm, ResetPasswordForm, SignupForm
from extensions import limiter, token_issuer
from services.account_service import AccountService
from utils.api import validated


@auth_bp.route('/signup', methods=['POST'])
@limiter.limit("10 per hour")
def signup():
    """Create a new local account"""
    form = validated(SignupForm())
    user = AccountService.create_user(form.email.data, form.password.data, name=form.name.data)
    return jsonify(user.to_dict()), 200


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")  # Rate limit login attempts
def login():
    """Sign in with email and password; returns an access token"""
    form = validated(LoginForm())
    user = AccountService.authenticate(form.email.data, form.password.data)
    current_app.logger.info(f'User {user.id} logged in')
    return jsonify({'token': token_issuer.issue(user)}), 200


@auth_bp.route('/forgot', methods=['POST'])
@limiter.limit("5 per hour")
def forgot():
    """Email a password reset link"""
    form = validated(ForgotPasswordForm())
    base_url = current_app.config.get('FRONTEND_URL') or request.host_url
    AccountService.start_password_reset(form.email.data, base_url)
    return jsonify({'msg': f'An e-mail has been sent to {form.email.data.strip().lower()} '
                           f'with further instructions.'}), 200


@auth_bp.route('/reset/<token>', methods=['POST'])
@limiter.limit("10 per hour")
def reset(token):
    """Set a new password using a reset token; logs the user in"""
    form = validated(ResetPasswordForm())
    user = AccountService.complete_password_reset(token, form.password.data)
    return jsonify({
        'msg': 'Success! Your password has been changed.',
        'token': token_issuer.issue(user),
    }), 200
