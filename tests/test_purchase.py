import unittest
from unittest import mock

from sqlalchemy import event
from sqlalchemy.exc import DatabaseError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from campus_exchange.extensions import db
from campus_exchange.models import Listing, Transaction
from tests.helpers import ApiTestCase


class TestPurchaseScenario(ApiTestCase):
    """Listing 7 by seller 2, bought by buyer 3 for 500."""

    def setUp(self):
        super().setUp()
        self.make_user(2, "Seller Two", "seller2@campus.edu")
        self.make_user(3, "Buyer Three", "buyer3@campus.edu")
        self.make_listing(7, seller_id=2)

    def purchase(self, **overrides):
        body = {"listingId": 7, "buyerId": 3, "amount": 500, "paymentMethod": "UPI"}
        body.update(overrides)
        return self.client.post("/purchase", json=body)

    def test_purchase_marks_sold_and_records_transaction(self):
        resp = self.purchase()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["message"], "Purchase successful")

        listing_ids = [item["ListingId"] for item in self.client.get("/listings").get_json()]
        self.assertNotIn(7, listing_ids)
        self.assertEqual(db.session.get(Listing, 7).status, "Sold")

        transactions = Transaction.query.filter_by(listing_id=7).all()
        self.assertEqual(len(transactions), 1)
        txn = transactions[0]
        self.assertEqual(txn.transaction_id, resp.get_json()["transactionId"])
        self.assertEqual((txn.buyer_id, txn.seller_id), (3, 2))
        self.assertEqual(float(txn.amount), 500.0)
        self.assertEqual(txn.payment_method, "UPI")

    def test_repeat_purchase_is_rejected(self):
        self.assertEqual(self.purchase().status_code, 200)

        resp = self.purchase()
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Item already sold")
        self.assertEqual(Transaction.query.filter_by(listing_id=7).count(), 1)

    def test_second_buyer_is_rejected(self):
        self.make_user(4, "Buyer Four", "buyer4@campus.edu")
        self.assertEqual(self.purchase().status_code, 200)

        resp = self.purchase(buyerId=4)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Item already sold")
        self.assertEqual(Transaction.query.one().buyer_id, 3)

    def test_self_purchase_is_rejected(self):
        resp = self.purchase(buyerId=2)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "You cannot purchase your own listing.")
        self.assertEqual(Transaction.query.count(), 0)
        self.assertEqual(db.session.get(Listing, 7).status, "Available")

    def test_self_purchase_with_string_id(self):
        resp = self.purchase(buyerId="2")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Transaction.query.count(), 0)

    def test_unknown_listing(self):
        resp = self.purchase(listingId=99)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["error"], "Item not found")

    def test_unknown_buyer(self):
        resp = self.purchase(buyerId=42)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(Transaction.query.count(), 0)
        self.assertEqual(db.session.get(Listing, 7).status, "Available")

    def test_missing_fields(self):
        resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 3})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "Missing fields: amount")

    def test_non_ascii_digit_ids_are_rejected(self):
        for field in ("listingId", "buyerId"):
            resp = self.purchase(**{field: "²"})
            self.assertEqual(resp.status_code, 400, field)
            self.assertIn(field, resp.get_json()["error"])
        self.assertEqual(Transaction.query.count(), 0)

    def test_invalid_amount(self):
        resp = self.purchase(amount=-1)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Transaction.query.count(), 0)

    def test_default_payment_method(self):
        resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 3, "amount": 500})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Transaction.query.one().payment_method, "UPI")


class TestPurchaseStorageFailures(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.make_user(2, "Seller Two", "seller2@campus.edu")
        self.make_user(3, "Buyer Three", "buyer3@campus.edu")
        self.make_listing(7, seller_id=2)

    def test_failed_commit_leaves_nothing_behind(self):
        error = DatabaseError("COMMIT", {}, Exception("disk I/O error"))
        with mock.patch("sqlalchemy.orm.Session.commit", side_effect=error):
            resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 3, "amount": 500})

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "Internal server error"})
        self.assertEqual(Transaction.query.count(), 0)
        self.assertEqual(db.session.get(Listing, 7).status, "Available")

    def test_pool_exhaustion_is_retryable(self):
        with mock.patch(
            "campus_exchange.routes.purchase.purchase_listing",
            side_effect=PoolTimeoutError("QueuePool limit of size 10 overflow 0 reached"),
        ):
            resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 3, "amount": 500})

        self.assertEqual(resp.status_code, 503)
        self.assertIn("Retry-After", resp.headers)
        self.assertNotIn("QueuePool", resp.get_json()["error"])

    def test_sale_recorded_by_another_request_is_already_sold(self):
        # A sale row exists while the listing still reads Available, as when
        # a concurrent purchase commits between our check and our insert
        self.make_user(4, "Buyer Four", "buyer4@campus.edu")
        db.session.add(Transaction(listing_id=7, buyer_id=3, seller_id=2, amount=500))
        db.session.commit()

        resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 4, "amount": 500})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"error": "Item already sold"})
        self.assertEqual(Transaction.query.filter_by(listing_id=7).count(), 1)
        self.assertEqual(Transaction.query.one().buyer_id, 3)

    def test_no_queries_after_commit(self):
        state = {"committed": False}

        def on_commit(conn):
            state["committed"] = True

        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if state["committed"]:
                raise OperationalError(statement, parameters, Exception("connection lost"))

        event.listen(db.engine, "commit", on_commit)
        event.listen(db.engine, "before_cursor_execute", before_cursor_execute)
        try:
            resp = self.client.post("/purchase", json={"listingId": 7, "buyerId": 3, "amount": 500})
        finally:
            event.remove(db.engine, "commit", on_commit)
            event.remove(db.engine, "before_cursor_execute", before_cursor_execute)

        self.assertTrue(state["committed"])
        self.assertEqual(resp.status_code, 200)
        txn = Transaction.query.one()
        self.assertEqual(resp.get_json()["transactionId"], txn.transaction_id)
        self.assertEqual(db.session.get(Listing, 7).status, "Sold")


if __name__ == '__main__':
    unittest.main()
