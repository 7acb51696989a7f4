"""
Authentication Forms
Request-body validation for signup, login and password reset
"""
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional, ValidationError
import re


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Email is not valid')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password cannot be blank')
    ])


class SignupForm(FlaskForm):
    """New local account"""
    email = StringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Email is not valid')
    ])
    name = StringField('Your Name', validators=[
        Optional(),
        Length(max=100, message='Name must be at most 100 characters')
    ])
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    confirm_password = PasswordField('Confirm Password', name='confirmPassword', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords do not match')
    ])

    def validate_password(self, field):
        is_valid, error = validate_password_strength(field.data)
        if not is_valid:
            raise ValidationError(error)


class ForgotPasswordForm(FlaskForm):
    email = StringField('Email', validators=[
        DataRequired(message='Please enter a valid email address.'),
        Email(message='Please enter a valid email address.')
    ])


class ResetPasswordForm(FlaskForm):
    password = PasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
    confirm = PasswordField('Confirm Password', validators=[
        DataRequired(message='Please confirm your password'),
        EqualTo('password', message='Passwords must match.')
    ])

    def validate_password(self, field):
        is_valid, error = validate_password_strength(field.data)
        if not is_valid:
            raise ValidationError(error)


def validate_password_strength(password):
    """
    Validate password meets security requirements
    Returns: (is_valid, error_message)
    """
    from flask import current_app

    min_length = current_app.config.get('PASSWORD_MIN_LENGTH', 8)
    require_uppercase = current_app.config.get('PASSWORD_REQUIRE_UPPERCASE', False)
    require_lowercase = current_app.config.get('PASSWORD_REQUIRE_LOWERCASE', False)
    require_digit = current_app.config.get('PASSWORD_REQUIRE_DIGIT', True)
    require_special = current_app.config.get('PASSWORD_REQUIRE_SPECIAL', False)

    password = password or ''
    errors = []

    if len(password) < min_length:
        errors.append(f"at least {min_length} characters")

    if require_uppercase and not re.search(r'[A-Z]', password):
        errors.append("an uppercase letter")

    if require_lowercase and not re.search(r'[a-z]', password):
        errors.append("a lowercase letter")

    if require_digit and not re.search(r'\d', password):
        errors.append("a number")

    if require_special and not re.search(r'[!@#$%^&*(),.?":{}|<>]', password):
        errors.append("a special character (!@#$%^&*(),.?\":{}|<>)")

    if errors:
        return False, f"Password must contain {', '.join(errors)}"

    return True, None
