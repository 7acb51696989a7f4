"""
HTTP-level tests using the Flask test client.

Covers authentication (401s, token transport), the family request/resolve
endpoints and the expense endpoints end to end.
"""
import pytest

from extensions import token_issuer
from models.family import FamilyMemberRequest


def _error_code(response):
    return response.get_json()['error']['code']


# ---------------------------------------------------------------------------
# Auth boundaries
# ---------------------------------------------------------------------------

class TestUnauthenticated:
    def test_get_expenses_without_token_is_401(self, client):
        response = client.get('/expenses')
        assert response.status_code == 401
        assert _error_code(response) == 'Unauthorized'

    def test_get_expenses_with_bad_token_is_401(self, client):
        response = client.get('/expenses', headers={'x-access-token': 'garbage'})
        assert response.status_code == 401

    @pytest.mark.parametrize('path', ['/account', '/account/family'])
    def test_account_requires_token(self, client, path):
        assert client.get(path).status_code == 401

    def test_family_request_requires_token(self, client):
        response = client.post('/account/family/request', json={'email': 'a@example.com'})
        assert response.status_code == 401

    def test_unknown_url_is_404(self, client):
        response = client.get('/reset')
        assert response.status_code == 404

    def test_deleted_user_token_is_401(self, client, alice, auth_headers):
        headers = auth_headers(alice)
        assert client.post('/account/delete', headers=headers).status_code == 200
        assert client.get('/expenses', headers=headers).status_code == 401


class TestTokenTransport:
    def test_bearer_header(self, client, alice):
        token = token_issuer.issue(alice)
        response = client.get('/account', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 200
        assert response.get_json()['email'] == alice.email

    def test_query_string(self, client, alice):
        token = token_issuer.issue(alice)
        assert client.get(f'/account?token={token}').status_code == 200


# ---------------------------------------------------------------------------
# Signup / login
# ---------------------------------------------------------------------------

class TestSignupLogin:
    def test_signup_then_login(self, client):
        response = client.post('/signup', json={
            'email': 'dana@example.com',
            'password': 'password1',
            'confirmPassword': 'password1',
        })
        assert response.status_code == 200
        assert response.get_json()['email'] == 'dana@example.com'

        response = client.post('/login', json={'email': 'dana@example.com', 'password': 'password1'})
        assert response.status_code == 200
        token = response.get_json()['token']

        assert client.get('/expenses', headers={'x-access-token': token}).status_code == 200

    def test_signup_password_mismatch(self, client):
        response = client.post('/signup', json={
            'email': 'dana@example.com',
            'password': 'password1',
            'confirmPassword': 'password2',
        })
        assert response.status_code == 400
        assert 'confirmPassword' in response.get_json()['error']['fields']

    def test_signup_duplicate_email(self, client, alice):
        response = client.post('/signup', json={
            'email': alice.email,
            'password': 'password1',
            'confirmPassword': 'password1',
        })
        assert response.status_code == 400
        assert _error_code(response) == 'AlreadyExists'

    def test_login_bad_password(self, client, alice):
        response = client.post('/login', json={'email': alice.email, 'password': 'wrong'})
        assert response.status_code == 401

    def test_login_invalid_email(self, client):
        response = client.post('/login', json={'email': 'not-an-email', 'password': 'x'})
        assert response.status_code == 400
        assert 'email' in response.get_json()['error']['fields']


# ---------------------------------------------------------------------------
# Family endpoints
# ---------------------------------------------------------------------------

class TestFamilyEndpoints:
    def test_request_and_approve(self, client, alice, bob, auth_headers):
        response = client.post('/account/family/request', json={'email': alice.email},
                               headers=auth_headers(bob))
        assert response.status_code == 200

        pending = client.get('/account/family', headers=auth_headers(alice)).get_json()
        assert [u['email'] for u in pending['familyMemberRequests']] == [bob.email]

        response = client.post('/account/family/resolve', json={'email': bob.email, 'approve': True},
                               headers=auth_headers(alice))
        body = response.get_json()
        assert response.status_code == 200
        assert body['outcome'] == 'approved'
        assert [u['email'] for u in body['familyMembers']] == [bob.email]
        assert body['familyMemberRequests'] == []

        bob_family = client.get('/account/family', headers=auth_headers(bob)).get_json()
        assert [u['email'] for u in bob_family['familyMembers']] == [alice.email]

    def test_unknown_email_is_400_not_found(self, client, bob, auth_headers):
        response = client.post('/account/family/request', json={'email': 'ghost@example.com'},
                               headers=auth_headers(bob))
        assert response.status_code == 400
        assert _error_code(response) == 'NotFound'

    def test_duplicate_request_is_400(self, client, alice, bob, auth_headers):
        client.post('/account/family/request', json={'email': alice.email}, headers=auth_headers(bob))
        response = client.post('/account/family/request', json={'email': alice.email},
                               headers=auth_headers(bob))
        assert response.status_code == 400
        assert _error_code(response) == 'AlreadyLinkedOrPending'
        assert FamilyMemberRequest.query.count() == 1

    def test_resolve_is_200_for_every_branch(self, client, alice, bob, auth_headers):
        client.post('/account/family/request', json={'email': alice.email}, headers=auth_headers(bob))

        reject = client.post('/account/family/resolve', json={'email': bob.email, 'approve': 'false'},
                             headers=auth_headers(alice))
        again = client.post('/account/family/resolve', json={'email': bob.email, 'approve': 'false'},
                            headers=auth_headers(alice))

        assert reject.status_code == 200
        assert reject.get_json()['outcome'] == 'rejected'
        assert again.status_code == 200
        assert again.get_json()['outcome'] == 'already_resolved'

    def test_resolve_requires_approve_flag(self, client, alice, bob, auth_headers):
        response = client.post('/account/family/resolve', json={'email': bob.email},
                               headers=auth_headers(alice))
        assert response.status_code == 400
        assert 'approve' in response.get_json()['error']['fields']

    def test_unlink(self, client, linked, auth_headers):
        alice, bob = linked
        response = client.post('/account/family/unlink', json={'email': alice.email},
                               headers=auth_headers(bob))
        assert response.status_code == 200
        assert response.get_json()['removed'] is True
        alice_family = client.get('/account/family', headers=auth_headers(alice)).get_json()
        assert alice_family['familyMembers'] == []


# ---------------------------------------------------------------------------
# Expense endpoints
# ---------------------------------------------------------------------------

class TestExpenseEndpoints:
    def test_family_scenario(self, client, linked, currency, auth_headers):
        alice, bob = linked
        response = client.post('/expenses', json={
            'amount': 10,
            'date': '01-01-2024',
            'category': 'food',
            'currency': currency.id,
        }, headers=auth_headers(alice))
        assert response.status_code == 200
        created = response.get_json()
        assert created['user_id'] == alice.id

        bob_view = client.get('/expenses', headers=auth_headers(bob)).get_json()
        alice_view = client.get('/expenses', headers=auth_headers(alice)).get_json()

        assert [(e['id'], e['user']) for e in bob_view['expenses']] == [(created['id'], 'Alice')]
        assert [(e['id'], e['user']) for e in alice_view['expenses']] == [(created['id'], 'Me')]
        assert [c['code'] for c in alice_view['currencies']] == ['EUR']

    def test_owner_cannot_be_spoofed(self, client, alice, bob, currency, auth_headers):
        response = client.post('/expenses', json={
            'amount': 3,
            'date': '01-01-2024',
            'category': 'Food',
            'currency': currency.id,
            'user_id': alice.id,
        }, headers=auth_headers(bob))

        assert response.get_json()['user_id'] == bob.id
        assert client.get('/expenses', headers=auth_headers(alice)).get_json()['expenses'] == []

    def test_missing_fields_is_400(self, client, alice, auth_headers):
        response = client.post('/expenses', json={'amount': ''}, headers=auth_headers(alice))

        assert response.status_code == 400
        error = response.get_json()['error']
        assert error['code'] == 'ValidationError'
        assert set(error['fields']) == {'amount', 'date', 'category', 'currency'}

    def test_edit_and_delete_are_owner_only(self, client, linked, currency, auth_headers):
        alice, bob = linked
        created = client.post('/expenses', json={
            'amount': 7, 'date': '05-01-2024', 'category': 'Food', 'currency': currency.id,
        }, headers=auth_headers(alice)).get_json()

        forbidden = client.post(f'/expenses/{created["id"]}/edit', json={'amount': 1},
                                headers=auth_headers(bob))
        assert forbidden.status_code == 404

        edited = client.post(f'/expenses/{created["id"]}/edit', json={'amount': 8},
                             headers=auth_headers(alice))
        assert edited.status_code == 200
        assert edited.get_json()['amount'] == 8.0

        assert client.post(f'/expenses/{created["id"]}/delete', headers=auth_headers(bob)).status_code == 404
        assert client.post(f'/expenses/{created["id"]}/delete', headers=auth_headers(alice)).status_code == 200


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------

class TestContact:
    def test_contact_sends_mail(self, client, app):
        from extensions import mail
        with mail.record_messages() as outbox:
            response = client.post('/contact', json={
                'name': 'Eve', 'email': 'eve@example.com', 'message': 'Hello there',
            })

        assert response.status_code == 200
        assert outbox[0].recipients == [app.config['CONTACT_RECIPIENT']]
        assert outbox[0].subject == 'Contact Form | Spendlist'

    def test_contact_validation(self, client):
        response = client.post('/contact', json={'name': '', 'email': 'bad', 'message': ''})
        assert response.status_code == 400
        assert set(response.get_json()['error']['fields']) == {'name', 'email', 'message'}

    def test_contact_slow_mail_server_is_503(self, client, monkeypatch):
        import time
        from extensions import mail, notifier

        monkeypatch.setattr(mail, 'send', lambda message: time.sleep(1.0))
        monkeypatch.setattr(notifier, 'timeout', 0.1)

        response = client.post('/contact', json={
            'name': 'Eve', 'email': 'eve@example.com', 'message': 'Hello there',
        })
        assert response.status_code == 503
        assert _error_code(response) == 'MailFailure'

    def test_contact_mail_failure_is_503(self, client, monkeypatch):
        from extensions import mail

        def _boom(message):
            raise ConnectionRefusedError('smtp down')
        monkeypatch.setattr(mail, 'send', _boom)

        response = client.post('/contact', json={
            'name': 'Eve', 'email': 'eve@example.com', 'message': 'Hello there',
        })
        assert response.status_code == 503
