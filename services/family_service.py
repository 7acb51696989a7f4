from enum import Enum

from flask import current_app
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from extensions import db, notifier
from models.family import FamilyLink, FamilyMemberRequest
from models.users import User
from services.errors import (
    AlreadyLinkedOrPending,
    NotFound,
    PartialUpdate,
    Unauthorized,
    ValidationError,
)
from utils.db_helpers import atomic, lock_users, normalize_email


class ResolveOutcome(str, Enum):
    APPROVED = 'approved'
    REJECTED = 'rejected'
    ALREADY_RESOLVED = 'already_resolved'


class FamilyService:
    """Family links between users and the requests that lead to them.

    Graph rules:
    1. A link is symmetric: (A, B) in family_links iff (B, A) is.
       Both rows are written and deleted in one transaction.
    2. A request (owner, requester) means *requester* asked to join *owner*'s
       family. Only the owner resolves it, and resolving always deletes it.
    3. Whoever deletes the request row owns the outcome; a caller that finds
       it already gone gets ALREADY_RESOLVED, never an error.
    4. Half-links left behind by anything outside this service are completed
       by ``reconcile`` on the next read of either user's family.
    """

    @staticmethod
    def get_user_by_email(email):
        """Return the user with *email* or raise ``NotFound``."""
        email = normalize_email(email)
        if not email:
            raise ValidationError('Please enter a valid email address.',
                                  fields={'email': 'Please enter a valid email address.'})
        user = User.query.filter_by(email=email).first()
        if user is None:
            raise NotFound()
        return user

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    @staticmethod
    def request_link(requester_id, target_email):
        """Ask the owner of *target_email* to add *requester_id* to their family."""
        target = FamilyService.get_user_by_email(target_email)
        if target.id == requester_id:
            raise ValidationError("You can't add yourself as a family member.",
                                  fields={'email': "You can't add yourself as a family member."})

        with atomic('family link request'):
            users = lock_users([requester_id, target.id])
            requester = users.get(requester_id)
            if requester is None:
                raise Unauthorized()

            if FamilyService._linked_either_way(requester_id, target.id):
                raise AlreadyLinkedOrPending()
            pending = FamilyMemberRequest.query.filter_by(
                owner_id=target.id, requester_id=requester_id
            ).first()
            if pending is not None:
                raise AlreadyLinkedOrPending()

            request = FamilyMemberRequest(owner_id=target.id, requester_id=requester_id)
            db.session.add(request)
            try:
                db.session.flush()
            except IntegrityError:
                # Lost a race with an identical request
                raise AlreadyLinkedOrPending()

        current_app.logger.info(f'Family request: user {requester_id} -> user {target.id}')
        notifier.notify(
            target.email,
            'New family member request',
            f'Hello,\n\n{requester.display_name} ({requester.email}) would like to share '
            f'expenses with you as a family member.\n\n'
            f'Open your account page to approve or reject the request.\n',
        )
        return request

    @staticmethod
    def resolve_link(owner_id, requester_email, approve):
        """Approve or reject the pending request from *requester_email*.

        Returns a ``ResolveOutcome``. Resolving a request that no longer
        exists is a no-op.
        """
        requester = FamilyService.get_user_by_email(requester_email)

        with atomic('resolve family request'):
            users = lock_users([owner_id, requester.id])
            if owner_id not in users:
                raise Unauthorized()

            claimed = FamilyMemberRequest.query.filter_by(
                owner_id=owner_id, requester_id=requester.id
            ).delete(synchronize_session=False)

            if not claimed:
                outcome = ResolveOutcome.ALREADY_RESOLVED
            elif approve:
                # A crossing request the other way is satisfied by this link too
                FamilyMemberRequest.query.filter_by(
                    owner_id=requester.id, requester_id=owner_id
                ).delete(synchronize_session=False)
                FamilyService._add_link_side(owner_id, requester.id)
                FamilyService._add_link_side(requester.id, owner_id)
                db.session.flush()
                FamilyService._check_symmetric(owner_id, requester.id)
                outcome = ResolveOutcome.APPROVED
            else:
                outcome = ResolveOutcome.REJECTED

        current_app.logger.info(
            f'Family request from user {requester.id} to user {owner_id}: {outcome.value}'
        )
        return outcome

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    @staticmethod
    def unlink(owner_id, other_email):
        """Remove the link between *owner_id* and *other_email* on both sides.

        Returns True if a link was removed, False if there was none.
        """
        other = FamilyService.get_user_by_email(other_email)

        with atomic('unlink family member'):
            lock_users([owner_id, other.id])
            removed = FamilyLink.query.filter(
                FamilyService._pair_filter(owner_id, other.id)
            ).delete(synchronize_session=False)

        if removed:
            current_app.logger.info(f'Family link removed: user {owner_id} <-> user {other.id}')
        return removed > 0

    @staticmethod
    def family_members(user_id):
        """Live list of *user_id*'s family members, ordered by email."""
        FamilyService.reconcile(user_id)
        return (
            User.query
            .join(FamilyLink, FamilyLink.member_id == User.id)
            .filter(FamilyLink.user_id == user_id)
            .order_by(User.email)
            .all()
        )

    @staticmethod
    def family_member_ids(user_id):
        return {u.id for u in FamilyService.family_members(user_id)}

    @staticmethod
    def pending_requests(user_id):
        """Users waiting for *user_id* to approve them, ordered by email."""
        return (
            User.query
            .join(FamilyMemberRequest, FamilyMemberRequest.requester_id == User.id)
            .filter(FamilyMemberRequest.owner_id == user_id)
            .order_by(User.email)
            .all()
        )

    @staticmethod
    def reconcile(user_id=None):
        """Complete any half-link touching *user_id* (or every user if None).

        Returns the number of missing sides that were written.
        """
        reverse = aliased(FamilyLink)
        query = (
            db.session.query(FamilyLink.user_id, FamilyLink.member_id)
            .outerjoin(reverse, and_(reverse.user_id == FamilyLink.member_id,
                                     reverse.member_id == FamilyLink.user_id))
            .filter(reverse.id.is_(None))
        )
        if user_id is not None:
            query = query.filter(or_(FamilyLink.user_id == user_id,
                                     FamilyLink.member_id == user_id))
        half_links = query.all()
        if not half_links:
            return 0

        with atomic('reconcile family links'):
            for link_user_id, link_member_id in half_links:
                current_app.logger.warning(
                    f'{PartialUpdate.code}: family link {link_user_id} -> {link_member_id} '
                    f'has no reverse side, repairing'
                )
                db.session.add(FamilyLink(user_id=link_member_id, member_id=link_user_id))
        return len(half_links)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _pair_filter(a_id, b_id):
        return or_(
            and_(FamilyLink.user_id == a_id, FamilyLink.member_id == b_id),
            and_(FamilyLink.user_id == b_id, FamilyLink.member_id == a_id),
        )

    @staticmethod
    def _linked_either_way(a_id, b_id):
        return FamilyLink.query.filter(FamilyService._pair_filter(a_id, b_id)).first() is not None

    @staticmethod
    def _add_link_side(user_id, member_id):
        exists = FamilyLink.query.filter_by(user_id=user_id, member_id=member_id).first()
        if exists is None:
            db.session.add(FamilyLink(user_id=user_id, member_id=member_id))

    @staticmethod
    def _check_symmetric(a_id, b_id):
        sides = FamilyLink.query.filter(FamilyService._pair_filter(a_id, b_id)).count()
        if sides != 2:
            raise PartialUpdate()
