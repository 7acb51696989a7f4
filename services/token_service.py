"""
Access token issuing and verification.

Tokens are HS256 JWTs carrying the caller's id, email, profile, categories and
a snapshot of their family list taken at login. The snapshot is for clients
only: ``verify`` re-reads the user so that every authorization decision is
made against live relationship state.
"""
from datetime import datetime, timezone

import jwt

from services.errors import Unauthorized


class TokenIssuer:
    """Flask extension that signs and checks access tokens."""

    def __init__(self, app=None):
        self.secret_key = None
        self.algorithm = 'HS256'
        self.expires_in = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.secret_key = app.config['JWT_SECRET_KEY']
        self.algorithm = app.config.get('JWT_ALGORITHM', 'HS256')
        self.expires_in = app.config.get('JWT_EXPIRES_IN')
        app.extensions['token_issuer'] = self

    def issue(self, user):
        """Return a signed token for *user*."""
        now = datetime.now(timezone.utc)
        payload = {
            'id': user.id,
            'email': user.email,
            'familyMembers': sorted(m.id for m in user.family_members),
            'profile': user.profile,
            'categories': user.get_categories(),
            'iat': now,
        }
        if self.expires_in:
            payload['exp'] = now + self.expires_in
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token):
        """Return the token's claims or raise ``Unauthorized``."""
        if not token:
            raise Unauthorized()
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized('Session has expired, please log in again.')
        except jwt.InvalidTokenError:
            raise Unauthorized()
        if not isinstance(claims.get('id'), int):
            raise Unauthorized()
        return claims

    def verify(self, token):
        """Resolve *token* to a live, active ``User`` or ``None``."""
        from extensions import db
        from models.users import User

        try:
            claims = self.decode(token)
        except Unauthorized:
            return None
        user = db.session.get(User, claims['id'])
        if user is None or not user.is_active:
            return None
        return user


def token_from_request(request):
    """Pull a token from header, query string or JSON body, in that order."""
    token = request.headers.get('x-access-token')
    if not token:
        auth_header = request.headers.get('Authorization', '')
        if auth_header.lower().startswith('bearer '):
            token = auth_header[7:].strip()
    if not token:
        token = request.args.get('token')
    if not token and request.is_json:
        body = request.get_json(silent=True)
        if isinstance(body, dict):
            token = body.get('token')
    return token or None
