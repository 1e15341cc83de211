"""
Listing Model
Status: Available | Sold  (Available -> Sold exactly once, via a purchase)
"""

from datetime import datetime, timezone

from campus_exchange.extensions import db

AVAILABLE = "Available"
SOLD = "Sold"


class Listing(db.Model):
    __tablename__ = "listings"

    listing_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.user_id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    item_condition = db.Column(db.String(50), nullable=False, default="Good")
    status = db.Column(
        db.Enum(AVAILABLE, SOLD, name="listing_status"),
        nullable=False,
        default=AVAILABLE,
        index=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    seller = db.relationship("User", back_populates="listings")

    def to_dict(self):
        return {
            "ListingId":     self.listing_id,
            "SellerId":      self.seller_id,
            "Title":         self.title,
            "Description":   self.description,
            "Price":         float(self.price),
            "ItemCondition": self.item_condition,
            "Status":        self.status,
            "CreatedAt":     self.created_at.isoformat() if self.created_at else None,
        }
