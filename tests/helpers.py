import unittest
from decimal import Decimal

from campus_exchange.app import create_app, shutdown
from campus_exchange.extensions import db
from campus_exchange.models import Listing, User

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    # Minimum bcrypt cost keeps the suite fast
    'BCRYPT_LOG_ROUNDS': 4,
    'LOG_LEVEL': 'WARNING',
}

PASSWORD = "password123"


class ApiTestCase(unittest.TestCase):
    config = TEST_CONFIG

    def setUp(self):
        self.app = create_app(dict(self.config))
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()
        shutdown(self.app)

    # --- helpers ---------------------------------------------------------

    def register(self, full_name, email, password=PASSWORD, **extra):
        body = {"FullName": full_name, "Email": email, "PasswordHash": password}
        body.update(extra)
        resp = self.client.post("/add-user", json=body)
        self.assertEqual(resp.status_code, 200, resp.get_json())
        return resp.get_json()["userId"]

    def add_listing(self, seller_id, title="Desk lamp", price=250, **extra):
        body = {"sellerId": seller_id, "title": title, "price": price}
        body.update(extra)
        resp = self.client.post("/add-listing", json=body)
        self.assertEqual(resp.status_code, 200, resp.get_json())
        return resp.get_json()["listingId"]

    def make_user(self, user_id, full_name, email):
        """Insert a user row with a fixed id."""
        user = User(user_id=user_id, full_name=full_name, email=email)
        user.set_password(PASSWORD, rounds=4)
        db.session.add(user)
        db.session.commit()
        return user

    def make_listing(self, listing_id, seller_id, title="Calculator", price="500.00"):
        listing = Listing(
            listing_id=listing_id,
            seller_id=seller_id,
            title=title,
            price=Decimal(price),
        )
        db.session.add(listing)
        db.session.commit()
        return listing
