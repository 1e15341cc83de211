"""
Transaction Model
Immutable record of a completed purchase. Written in the same database
transaction that flips the listing to Sold.
"""

from datetime import datetime, timezone

from campus_exchange.extensions import db


class Transaction(db.Model):
    __tablename__ = "transactions"

    transaction_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    # One sale per listing
    listing_id = db.Column(
        db.Integer, db.ForeignKey("listings.listing_id"), nullable=False, unique=True
    )
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_method = db.Column(db.String(50), nullable=False, default="UPI")
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self):
        return {
            "TransactionId": self.transaction_id,
            "ListingId":     self.listing_id,
            "BuyerId":       self.buyer_id,
            "SellerId":      self.seller_id,
            "Amount":        float(self.amount),
            "PaymentMethod": self.payment_method,
            "CreatedAt":     self.created_at.isoformat() if self.created_at else None,
        }
