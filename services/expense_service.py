from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from flask import current_app

from extensions import db
from models.currencies import Currency
from models.expenses import Expense
from models.users import User
from services.errors import ValidationError
from services.family_service import FamilyService
from utils.db_helpers import atomic, owned_get_or_404

DATE_FORMAT = '%d-%m-%Y'
DISPLAY_DATE_FORMAT = '%d-%m-%Y %a'
SELF_LABEL = 'Me'
CENTS = Decimal('0.01')
# Numeric(12, 2) column: ten digits before the decimal point
MAX_AMOUNT = Decimal(10) ** 10


class ExpenseService:
    """Who can see which expenses, and recording them.

    An expense is readable by a caller iff its owner is in
    ``visible_owners(caller)``: the caller plus their family members, read
    from live relationship state. Only the owner may change or delete it.
    """

    @staticmethod
    def visible_owners(viewer_id):
        return {viewer_id} | FamilyService.family_member_ids(viewer_id)

    @staticmethod
    def list_expenses(viewer_id):
        """Yield the viewer's visible expenses, newest first, each labelled.

        The rows are read in one query when iteration starts; the generator
        cannot be restarted.
        """
        owners = ExpenseService.visible_owners(viewer_id)
        rows = (
            db.session.query(Expense, User)
            .join(User, Expense.user_id == User.id)
            .filter(Expense.user_id.in_(owners))
            .order_by(Expense.date.desc(), Expense.updated_at.desc(), Expense.id.desc())
            .all()
        )
        for expense, owner in rows:
            item = expense.to_dict()
            item['date'] = expense.date.strftime(DISPLAY_DATE_FORMAT)
            item['user'] = SELF_LABEL if owner.id == viewer_id else owner.display_name
            yield item

    @staticmethod
    def list_currencies():
        return Currency.query.order_by(Currency.code).all()

    @staticmethod
    def record_expense(owner_id, amount, date, category, currency_id, comment=None):
        """Create an expense owned by *owner_id*."""
        values = ExpenseService._validate(
            {'amount': amount, 'date': date, 'category': category,
             'currency': currency_id, 'comment': comment},
            required=('amount', 'date', 'category', 'currency'),
        )
        with atomic('record expense'):
            expense = Expense(
                user_id=owner_id,
                amount=values['amount'],
                date=values['date'],
                category=values['category'],
                currency_id=values['currency'],
                comment=values.get('comment'),
            )
            db.session.add(expense)

        current_app.logger.info(f'Expense {expense.id} recorded for user {owner_id}')
        return expense

    @staticmethod
    def update_expense(owner_id, expense_id, **fields):
        """Change the given fields of one of *owner_id*'s expenses."""
        expense = owned_get_or_404(Expense, expense_id, owner_id)
        supplied = {k: v for k, v in fields.items()
                    if k in ('amount', 'date', 'category', 'currency', 'comment') and v is not None}
        values = ExpenseService._validate(supplied, required=tuple(k for k in supplied if k != 'comment'))

        with atomic('update expense'):
            for key, value in values.items():
                setattr(expense, 'currency_id' if key == 'currency' else key, value)

        current_app.logger.info(f'Expense {expense.id} updated by user {owner_id}')
        return expense

    @staticmethod
    def delete_expense(owner_id, expense_id):
        expense = owned_get_or_404(Expense, expense_id, owner_id)
        with atomic('delete expense'):
            db.session.delete(expense)
        current_app.logger.info(f'Expense {expense_id} deleted by user {owner_id}')

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(raw, required):
        """Return cleaned values or raise ``ValidationError`` listing every problem."""
        errors = {}
        values = {}

        for key in required:
            value = raw.get(key)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[key] = f'{key.capitalize()} can not be blank'

        if 'amount' in raw and 'amount' not in errors:
            try:
                amount = Decimal(str(raw['amount']).strip())
            except InvalidOperation:
                amount = None
            if amount is None or not amount.is_finite():
                errors['amount'] = 'Amount must be a number'
            else:
                amount = amount.quantize(CENTS) if abs(amount) < MAX_AMOUNT else amount
                if abs(amount) >= MAX_AMOUNT:
                    errors['amount'] = 'Amount is too large'
                else:
                    values['amount'] = amount

        if 'date' in raw and 'date' not in errors:
            parsed = parse_expense_date(raw['date'])
            if parsed is None:
                errors['date'] = 'Date must be in DD-MM-YYYY format'
            else:
                values['date'] = parsed

        if 'category' in raw and 'category' not in errors:
            values['category'] = str(raw['category']).strip()[:100]

        if 'currency' in raw and 'currency' not in errors:
            currency = None
            try:
                currency = db.session.get(Currency, int(raw['currency']))
            except (TypeError, ValueError):
                pass
            if currency is None:
                errors['currency'] = 'Unknown currency'
            else:
                values['currency'] = currency.id

        if raw.get('comment') is not None:
            values['comment'] = str(raw['comment']).strip()[:500]

        if errors:
            raise ValidationError('Expense is not valid.', fields=errors)
        return values


def parse_expense_date(value):
    """Accept a ``date``, ``DD-MM-YYYY`` or ISO ``YYYY-MM-DD``; ``None`` if neither."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in (DATE_FORMAT, '%Y-%m-%d'):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
