"""
Account Forms
Profile, password and family request bodies
"""
from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional, ValidationError

from blueprints.auth.forms import validate_password_strength


class ProfileForm(FlaskForm):
    email = StringField('Email', validators=[
        DataRequired(message='Please enter a valid email address.'),
        Email(message='Please enter a valid email address.')
    ])
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    gender = StringField('Gender', validators=[Optional(), Length(max=20)])
    location = StringField('Location', validators=[Optional(), Length(max=100)])
    website = StringField('Website', validators=[Optional(), Length(max=255)])


class PasswordForm(FlaskForm):
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


class FamilyEmailForm(FlaskForm):
    """Body of the family request / resolve / unlink calls"""
    email = StringField('Email', validators=[
        DataRequired(message='Please enter a valid email address.'),
        Email(message='Please enter a valid email address.')
    ])
