"""
Account blueprint routes (all require a valid access token).

  GET  /account                  – profile, categories, family and pending requests
  POST /account/profile          – update profile fields / email
  POST /account/password         – change password
  POST /account/categories       – replace the category list
  POST /account/delete           – delete the account and its relationships
  GET  /account/family           – family members and pending requests
  POST /account/family/request   – ask another user to add you to their family
  POST /account/family/resolve   – approve or reject a pending request
  POST /account/family/unlink    – remove a family member on both sides
"""
from flask import jsonify
from flask_login import current_user

from blueprints.account import account_bp
from blueprints.account.forms import FamilyEmailForm, PasswordForm, ProfileForm
from extensions import token_issuer
from services.account_service import AccountService
from services.errors import ValidationError
from services.family_service import FamilyService, ResolveOutcome
from utils.api import json_body, parse_bool, validated


def _family_payload(user_id):
    return {
        'familyMembers': [u.to_summary() for u in FamilyService.family_members(user_id)],
        'familyMemberRequests': [u.to_summary() for u in FamilyService.pending_requests(user_id)],
    }


# ── Profile ───────────────────────────────────────────────────────────────────

@account_bp.route('', methods=['GET'])
def index():
    payload = current_user.to_dict()
    payload.update(_family_payload(current_user.id))
    return jsonify(payload), 200


@account_bp.route('/profile', methods=['POST'])
def update_profile():
    form = validated(ProfileForm())
    user = AccountService.update_profile(
        current_user.id,
        email=form.email.data,
        name=form.name.data,
        gender=form.gender.data,
        location=form.location.data,
        website=form.website.data,
    )
    # Email and profile are embedded in the token, hand out a fresh one
    return jsonify({
        'msg': 'Profile information has been updated.',
        'user': user.to_dict(),
        'token': token_issuer.issue(user),
    }), 200


@account_bp.route('/password', methods=['POST'])
def update_password():
    form = validated(PasswordForm())
    AccountService.change_password(current_user.id, form.password.data)
    return jsonify({'msg': 'Password has been changed.'}), 200


@account_bp.route('/categories', methods=['POST'])
def update_categories():
    categories = json_body().get('categories')
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise ValidationError('Categories must be a list of names.',
                              fields={'categories': 'Categories must be a list of names.'})
    user = AccountService.update_categories(current_user.id, categories)
    return jsonify({'categories': user.get_categories()}), 200


@account_bp.route('/delete', methods=['POST'])
def delete_account():
    user_id = current_user.id
    AccountService.delete_account(user_id)
    return jsonify({'msg': 'Your account has been deleted.'}), 200


# ── Family ────────────────────────────────────────────────────────────────────

@account_bp.route('/family', methods=['GET'])
def family():
    return jsonify(_family_payload(current_user.id)), 200


@account_bp.route('/family/request', methods=['POST'])
def request_family():
    form = validated(FamilyEmailForm())
    FamilyService.request_link(current_user.id, form.email.data)
    return jsonify({'msg': 'Add family member request has been sent.'}), 200


@account_bp.route('/family/resolve', methods=['POST'])
def resolve_family():
    form = validated(FamilyEmailForm())
    approve = parse_bool(json_body().get('approve'))
    if approve is None:
        raise ValidationError('Request error', fields={'approve': 'approve must be true or false'})

    outcome = FamilyService.resolve_link(current_user.id, form.email.data, approve)
    messages = {
        ResolveOutcome.APPROVED: 'Family member request approved.',
        ResolveOutcome.REJECTED: 'Family member request rejected.',
        ResolveOutcome.ALREADY_RESOLVED: 'Family member request was already resolved.',
    }
    payload = {'msg': messages[outcome], 'outcome': outcome.value}
    payload.update(_family_payload(current_user.id))
    return jsonify(payload), 200


@account_bp.route('/family/unlink', methods=['POST'])
def unlink_family():
    form = validated(FamilyEmailForm())
    removed = FamilyService.unlink(current_user.id, form.email.data)
    msg = 'Family member removed.' if removed else 'That account is not your family member.'
    payload = {'msg': msg, 'removed': removed}
    payload.update(_family_payload(current_user.id))
    return jsonify(payload), 200
