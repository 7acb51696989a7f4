"""
User Model
Account credentials, profile, category preferences and the family sets
"""
import json
from extensions import db
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime


DEFAULT_CATEGORIES = [
    'Food',
    'Transport',
    'Housing',
    'Utilities',
    'Health',
    'Entertainment',
    'Clothing',
    'Education',
    'Gifts',
    'Other',
]


class User(UserMixin, db.Model):
    """A registered account"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    last_login = db.Column(db.DateTime)

    # Profile
    name = db.Column(db.String(100), nullable=False, default='')
    gender = db.Column(db.String(20), nullable=False, default='')
    location = db.Column(db.String(100), nullable=False, default='')
    website = db.Column(db.String(255), nullable=False, default='')

    # JSON list of expense category names, e.g. '["Food","Transport"]'
    categories = db.Column(db.Text, nullable=True)

    # Login security fields
    failed_login_attempts = db.Column(db.Integer, default=0, nullable=False)
    locked_until = db.Column(db.DateTime)

    # Password reset
    password_reset_token = db.Column(db.String(64), unique=True, nullable=True, index=True)
    password_reset_expires = db.Column(db.DateTime, nullable=True)

    # Read-only views of the relationship tables; writes go through FamilyService
    family_members = db.relationship(
        'User',
        secondary='family_links',
        primaryjoin='User.id == FamilyLink.user_id',
        secondaryjoin='User.id == FamilyLink.member_id',
        viewonly=True,
        order_by='User.email',
    )
    family_member_requests = db.relationship(
        'User',
        secondary='family_member_requests',
        primaryjoin='User.id == FamilyMemberRequest.owner_id',
        secondaryjoin='User.id == FamilyMemberRequest.requester_id',
        viewonly=True,
        order_by='User.email',
    )

    expenses = db.relationship('Expense', back_populates='owner', lazy='dynamic',
                               cascade='all, delete-orphan')

    def set_password(self, password):
        """Hash and set the user's password"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Check if provided password matches the hash"""
        return check_password_hash(self.password_hash, password)

    def update_last_login(self):
        """Update the last login timestamp"""
        self.last_login = datetime.utcnow()
        db.session.commit()

    def is_locked(self):
        """Check if account is locked due to failed login attempts"""
        if self.locked_until and self.locked_until > datetime.utcnow():
            return True
        return False

    def record_failed_login(self):
        """Record a failed login attempt and lock if threshold exceeded"""
        from flask import current_app
        self.failed_login_attempts += 1

        max_attempts = current_app.config.get('MAX_LOGIN_ATTEMPTS', 5)
        lockout_duration = current_app.config.get('LOCKOUT_DURATION')

        if self.failed_login_attempts >= max_attempts and lockout_duration:
            self.locked_until = datetime.utcnow() + lockout_duration

        db.session.commit()

    def reset_failed_logins(self):
        """Reset failed login attempts after successful login"""
        self.failed_login_attempts = 0
        self.locked_until = None
        db.session.commit()

    # ------------------------------------------------------------------
    # Profile / categories helpers
    # ------------------------------------------------------------------

    @property
    def display_name(self):
        """Profile name, falling back to the email address."""
        return self.name or self.email

    @property
    def profile(self):
        return {
            'name': self.name or '',
            'gender': self.gender or '',
            'location': self.location or '',
            'website': self.website or '',
        }

    def get_categories(self):
        """Return the user's category list (defaults if never set)."""
        if not self.categories:
            return list(DEFAULT_CATEGORIES)
        try:
            return list(json.loads(self.categories))
        except (ValueError, TypeError):
            return list(DEFAULT_CATEGORIES)

    def set_categories(self, categories_iterable):
        """Persist category names as JSON, keeping first-seen order."""
        seen = []
        for name in categories_iterable:
            name = (name or '').strip()
            if name and name not in seen:
                seen.append(name)
        self.categories = json.dumps(seen)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'profile': self.profile,
            'categories': self.get_categories(),
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self):
        """Minimal representation used in family listings."""
        return {'id': self.id, 'email': self.email, 'name': self.name or ''}

    def __repr__(self):
        return f'<User {self.email}>'
