"""
Tests for access tokens: claims, tamper detection, expiry, and that
authorization never trusts the family snapshot embedded in a token.
"""
from datetime import timedelta

import jwt
import pytest

from extensions import db, token_issuer
from services.errors import Unauthorized
from services.expense_service import ExpenseService
from services.family_service import FamilyService
from services.token_service import TokenIssuer


class TestIssue:
    def test_claims(self, app, linked):
        alice, bob = linked
        claims = token_issuer.decode(token_issuer.issue(alice))

        assert claims['id'] == alice.id
        assert claims['email'] == 'alice@example.com'
        assert claims['familyMembers'] == [bob.id]
        assert claims['profile']['name'] == 'Alice'
        assert 'Food' in claims['categories']
        assert 'exp' in claims


class TestVerify:
    def test_valid_token_resolves_user(self, app, alice):
        assert token_issuer.verify(token_issuer.issue(alice)).id == alice.id

    def test_tampered_token_is_rejected(self, app, alice, bob):
        alice_header, _, alice_sig = token_issuer.issue(alice).split('.')
        _, bob_payload, _ = token_issuer.issue(bob).split('.')
        swapped = '.'.join([alice_header, bob_payload, alice_sig])
        forged = jwt.encode({'id': alice.id}, 'not-the-secret', algorithm='HS256')

        assert token_issuer.verify(swapped) is None
        assert token_issuer.verify(forged) is None

    def test_expired_token_is_rejected(self, app, alice):
        issuer = TokenIssuer()
        issuer.secret_key = app.config['JWT_SECRET_KEY']
        issuer.expires_in = timedelta(seconds=-1)
        token = issuer.issue(alice)

        with pytest.raises(Unauthorized):
            token_issuer.decode(token)
        assert token_issuer.verify(token) is None

    def test_missing_token_is_rejected(self, app):
        with pytest.raises(Unauthorized):
            token_issuer.decode(None)

    def test_deactivated_user_is_rejected(self, app, alice):
        token = token_issuer.issue(alice)
        alice.is_active = False
        db.session.commit()

        assert token_issuer.verify(token) is None


class TestSnapshotIsNotAuthoritative:
    def test_link_made_after_login_is_visible(self, app, alice, bob):
        token = token_issuer.issue(bob)
        FamilyService.request_link(bob.id, alice.email)
        FamilyService.resolve_link(alice.id, bob.email, True)

        caller = token_issuer.verify(token)

        assert token_issuer.decode(token)['familyMembers'] == []
        assert alice.id in ExpenseService.visible_owners(caller.id)

    def test_unlink_after_login_revokes_visibility(self, app, linked):
        alice, bob = linked
        token = token_issuer.issue(bob)
        FamilyService.unlink(alice.id, bob.email)

        caller = token_issuer.verify(token)

        assert token_issuer.decode(token)['familyMembers'] == [alice.id]
        assert ExpenseService.visible_owners(caller.id) == {bob.id}
