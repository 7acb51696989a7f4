"""
Family relationship tables.

FamilyLink holds one direction of a family link: a link between A and B is
the pair of rows (A, B) and (B, A), always written in the same transaction.
FamilyMemberRequest holds a pending proposal: *requester* asked to be added
to *owner*'s family and is waiting for the owner to approve or reject.
"""
from datetime import datetime, timezone
from extensions import db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class FamilyLink(db.Model):
    """One side of a symmetric family link: *member* is in *user*'s family."""
    __tablename__ = 'family_links'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'member_id', name='uq_family_links_user_member'),
        db.CheckConstraint('user_id <> member_id', name='ck_family_links_not_self'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                          nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    def __repr__(self):
        return f'<FamilyLink {self.user_id} -> {self.member_id}>'


class FamilyMemberRequest(db.Model):
    """Pending request from *requester* to join *owner*'s family."""
    __tablename__ = 'family_member_requests'
    __table_args__ = (
        db.UniqueConstraint('owner_id', 'requester_id', name='uq_family_requests_owner_requester'),
    )

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                         nullable=False, index=True)
    requester_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                             nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    owner = db.relationship('User', foreign_keys=[owner_id])
    requester = db.relationship('User', foreign_keys=[requester_id])

    def __repr__(self):
        return f'<FamilyMemberRequest {self.requester_id} -> {self.owner_id}>'
