"""
Purchase Service
Sells a listing exactly once.

The listing row is locked (SELECT ... FOR UPDATE) for the whole unit of
work, so concurrent buyers of the same listing are serialized: the first
one inserts the Transaction and flips the listing to Sold, every later one
sees Sold and is rejected. Any failure rolls back both writes together.
"""

import logging

from sqlalchemy.exc import IntegrityError

from campus_exchange.errors import ConflictError, NotFoundError
from campus_exchange.extensions import db
from campus_exchange.models.listing import SOLD, Listing
from campus_exchange.models.transaction import Transaction
from campus_exchange.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "UPI"


def purchase_listing(listing_id, buyer_id, amount, payment_method=None):
    """
    Record the sale of listing_id to buyer_id and mark the listing Sold.

    Raises NotFoundError (no such listing or buyer) or ConflictError
    (already sold, or the buyer is the seller); nothing is written then.
    Returns the committed Transaction as a dict.
    """
    try:
        # Blocks until any in-flight purchase of this row commits or rolls back
        listing = (
            Listing.query
            .filter_by(listing_id=listing_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

        if listing is None:
            raise NotFoundError("Item not found")

        if listing.status == SOLD:
            raise ConflictError("Item already sold")

        if listing.seller_id == buyer_id:
            raise ConflictError("You cannot purchase your own listing.")

        if db.session.get(User, buyer_id) is None:
            raise NotFoundError("Buyer not found")

        transaction = Transaction(
            listing_id=listing.listing_id,
            buyer_id=buyer_id,
            seller_id=listing.seller_id,
            amount=amount,
            payment_method=payment_method or DEFAULT_PAYMENT_METHOD,
        )
        db.session.add(transaction)
        listing.status = SOLD
        db.session.flush()

        # Objects expire on commit; read everything needed before it
        receipt = transaction.to_dict()

        db.session.commit()

    except IntegrityError:
        # transactions.listing_id is unique: another sale got there first
        db.session.rollback()
        raise ConflictError("Item already sold")
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Listing %s sold to buyer %s (transaction %s)",
        listing_id, buyer_id, receipt["TransactionId"],
    )
    return receipt

