from extensions import db


class Currency(db.Model):
    __tablename__ = 'currencies'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(3), unique=True, nullable=False, index=True)  # ISO 4217, e.g. EUR
    name = db.Column(db.String(50), nullable=False)
    symbol = db.Column(db.String(5), nullable=False, default='')

    def to_dict(self):
        return {'id': self.id, 'code': self.code, 'name': self.name, 'symbol': self.symbol}

    def __repr__(self):
        return f'<Currency {self.code}>'


# Seeded by `flask currency seed` and init_db.py
DEFAULT_CURRENCIES = [
    ('USD', 'US Dollar', '$'),
    ('EUR', 'Euro', '€'),
    ('GBP', 'Pound Sterling', '£'),
    ('UAH', 'Ukrainian Hryvnia', '₴'),
    ('PLN', 'Polish Zloty', 'zł'),
]


def seed_currencies():
    """Add the default currencies that are missing. Returns how many were added."""
    added = 0
    for code, name, symbol in DEFAULT_CURRENCIES:
        if not Currency.query.filter_by(code=code).first():
            db.session.add(Currency(code=code, name=name, symbol=symbol))
            added += 1
    db.session.commit()
    return added
