"""
Database helpers for transactional writes and owner-scoped reads.

Every service mutation runs inside ``atomic()`` so that a multi-row change
(both sides of a family link, an account purge) is committed as a unit or
not at all, and so that store failures surface as ``PersistenceFailure``
instead of leaking SQLAlchemy exceptions to the caller.

Usage
-----
In any service function::

    from utils.db_helpers import atomic, lock_users, owned_get_or_404

    with atomic('approve family link'):
        lock_users([owner_id, requester_id])
        db.session.add(FamilyLink(user_id=owner_id, member_id=requester_id))
        db.session.add(FamilyLink(user_id=requester_id, member_id=owner_id))

    # Fetch a record only if *owner_id* owns it (404 otherwise)
    expense = owned_get_or_404(Expense, expense_id, owner_id)
"""
from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from services.errors import NotFound, PersistenceFailure, ServiceError


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

@contextmanager
def atomic(label='transaction'):
    """Commit on success; roll back on any error.

    ``ServiceError`` raised inside the block propagates unchanged after the
    rollback. Store errors are logged and re-raised as ``PersistenceFailure``.
    """
    try:
        yield db.session
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f'{label} failed: {exc}')
        raise PersistenceFailure() from exc


def lock_users(user_ids):
    """Lock user rows in ascending id order for the rest of the transaction.

    ``SELECT ... FOR UPDATE`` serialises concurrent relationship changes on
    PostgreSQL/MySQL. SQLite ignores it and serialises writers on its own.
    Returns the users keyed by id.
    """
    from models.users import User

    ids = sorted(set(user_ids))
    users = (
        User.query
        .filter(User.id.in_(ids))
        .order_by(User.id)
        .with_for_update()
        .all()
    )
    return {u.id: u for u in users}


# ---------------------------------------------------------------------------
# Owner-scoped lookups
# ---------------------------------------------------------------------------

def owned_get(model, record_id, owner_id):
    """Fetch *record_id* only if its ``user_id`` is *owner_id*; else ``None``."""
    if owner_id is None:
        return None
    return model.query.filter_by(id=record_id, user_id=owner_id).first()


def owned_get_or_404(model, record_id, owner_id):
    """Like ``owned_get`` but raises ``NotFound`` (HTTP 404) if nothing matches."""
    record = owned_get(model, record_id, owner_id)
    if record is None:
        raise NotFound(f'{model.__name__} not found.', status_code=404)
    return record


def normalize_email(email):
    """Lower-case and strip an email address; ``''`` for ``None``."""
    return (email or '').strip().lower()
