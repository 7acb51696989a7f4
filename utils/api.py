"""
Helpers shared by the JSON blueprints.
"""
from flask import request

from services.errors import ValidationError


def json_body():
    """Return the request's JSON object, or form data as a dict."""
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    return request.form.to_dict()


def validated(form, msg='Invalid input.'):
    """Validate a WTForms form or raise ``ValidationError`` with its field errors.

    Field keys are the names clients send (e.g. ``confirmPassword``).
    """
    if form.validate_on_submit():
        return form
    fields = {field.name: field.errors[0] for field in form if field.errors}
    raise ValidationError(msg, fields=fields)


def parse_bool(value):
    """Interpret JSON/form booleans; ``None`` when the value is not a boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', '1', 'yes'):
            return True
        if lowered in ('false', '0', 'no'):
            return False
    return None
