"""
Listing Service
Create listings and query the ones still for sale.
"""

import logging

from campus_exchange.errors import NotFoundError
from campus_exchange.extensions import db
from campus_exchange.models.listing import AVAILABLE, Listing
from campus_exchange.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_CONDITION = "Good"


def create_listing(seller_id, title, price, description=None, item_condition=None):
    if db.session.get(User, seller_id) is None:
        raise NotFoundError("Seller not found")

    listing = Listing(
        seller_id=seller_id,
        title=title,
        description=description,
        price=price,
        item_condition=item_condition or DEFAULT_CONDITION,
        status=AVAILABLE,
    )
    try:
        db.session.add(listing)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Seller %s listed item %s", seller_id, listing.listing_id)
    return listing


def get_available_listings():
    """
    All listings still Available, newest first, each with the seller's name.
    """
    rows = (
        db.session.query(Listing, User.full_name)
        .outerjoin(User, Listing.seller_id == User.user_id)
        .filter(Listing.status == AVAILABLE)
        .order_by(Listing.created_at.desc(), Listing.listing_id.desc())
        .all()
    )

    data = []
    for listing, seller_name in rows:
        item = listing.to_dict()
        item["SellerName"] = seller_name
        data.append(item)
    return data


def get_listing(listing_id):
    listing = db.session.get(Listing, listing_id)
    if listing is None:
        raise NotFoundError("Item not found")
    return listing
