"""
Tests for the User model: password hashing, categories, profile and login lockout.
"""
import json
from datetime import datetime, timedelta, timezone

from extensions import db
from models.users import DEFAULT_CATEGORIES


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_correct_password_accepted(self, app, user):
        assert user.check_password('TestPass1!') is True

    def test_wrong_password_rejected(self, app, user):
        assert user.check_password('WrongPass99!') is False

    def test_password_is_hashed(self, app, user):
        assert user.password_hash != 'TestPass1!', \
            "password_hash must store a hash, not the plain-text password"


# ---------------------------------------------------------------------------
# Categories / profile
# ---------------------------------------------------------------------------

class TestCategories:
    def test_defaults_when_unset(self, app, user):
        assert user.get_categories() == DEFAULT_CATEGORIES

    def test_set_categories_strips_and_deduplicates(self, app, user):
        user.set_categories([' Rent ', 'Food', 'Rent', ''])
        db.session.commit()

        assert json.loads(user.categories) == ['Rent', 'Food']
        assert user.get_categories() == ['Rent', 'Food']

    def test_corrupt_json_falls_back_to_defaults(self, app, user):
        user.categories = 'not json'
        db.session.commit()

        assert user.get_categories() == DEFAULT_CATEGORIES


class TestProfile:
    def test_display_name_prefers_profile_name(self, app, user):
        assert user.display_name == 'Owner User'

    def test_display_name_falls_back_to_email(self, app, carol):
        assert carol.display_name == 'carol@example.com'

    def test_profile_dict(self, app, user):
        user.location = 'Kyiv'
        db.session.commit()

        assert user.profile == {'name': 'Owner User', 'gender': '', 'location': 'Kyiv', 'website': ''}


# ---------------------------------------------------------------------------
# Login lockout
# ---------------------------------------------------------------------------

class TestLoginLockout:
    def test_account_not_locked_initially(self, app, user):
        assert user.is_locked() is False

    def test_lockout_applied_after_max_attempts(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        assert user.is_locked() is True
        assert user.locked_until is not None

    def test_failed_attempts_below_threshold_do_not_lock(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts - 1):
            user.record_failed_login()

        assert user.is_locked() is False

    def test_reset_clears_lockout(self, app, user):
        max_attempts = app.config['MAX_LOGIN_ATTEMPTS']
        for _ in range(max_attempts):
            user.record_failed_login()

        assert user.is_locked() is True

        user.reset_failed_logins()

        assert user.is_locked() is False
        assert user.failed_login_attempts == 0
        assert user.locked_until is None

    def test_expired_lockout_is_not_locked(self, app, user):
        """A locked_until timestamp in the past should not count as locked."""
        user.locked_until = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=1)
        db.session.commit()

        assert user.is_locked() is False
