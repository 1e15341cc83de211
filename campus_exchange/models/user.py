from datetime import datetime, timezone

import bcrypt

from campus_exchange.extensions import db


class User(db.Model):
    __tablename__ = 'users'

    user_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    full_name = db.Column(db.String(100), nullable=False)
    # Stored lower-cased, so the unique index is case-insensitive in practice
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.Text, nullable=False)
    role = db.Column(db.String(20), nullable=False, default='student')
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    listings = db.relationship('Listing', back_populates='seller', lazy=True)

    def set_password(self, password, rounds=12):
        self.password_hash = bcrypt.hashpw(
            password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)
        ).decode('utf-8')

    def check_password(self, password):
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    def to_dict(self):
        return {
            'UserId': self.user_id,
            'FullName': self.full_name,
            'Email': self.email,
            'Role': self.role,
        }
