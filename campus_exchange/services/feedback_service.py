"""
Feedback Service
Append-only seller ratings plus the per-user queries over them.
"""

import logging

from sqlalchemy import func

from campus_exchange.errors import NotFoundError
from campus_exchange.extensions import db
from campus_exchange.models.feedback import Feedback
from campus_exchange.models.listing import Listing
from campus_exchange.models.user import User

logger = logging.getLogger(__name__)


def record_feedback(from_user_id, to_user_id, rating, listing_id=None, comments=None):
    """
    Store a rating from one user to another. The rating is expected to be
    validated already (1-5).
    """
    if db.session.get(User, from_user_id) is None:
        raise NotFoundError("Reviewer not found")
    if db.session.get(User, to_user_id) is None:
        raise NotFoundError("Reviewed user not found")
    if listing_id is not None and db.session.get(Listing, listing_id) is None:
        raise NotFoundError("Item not found")

    feedback = Feedback(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        listing_id=listing_id,
        rating=rating,
        comments=comments,
    )
    try:
        db.session.add(feedback)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("User %s rated user %s: %s", from_user_id, to_user_id, rating)
    return feedback


def get_feedback_for_user(user_id):
    rows = (
        db.session.query(Feedback, User.full_name, Listing.title)
        .outerjoin(User, Feedback.from_user_id == User.user_id)
        .outerjoin(Listing, Feedback.listing_id == Listing.listing_id)
        .filter(Feedback.to_user_id == user_id)
        .order_by(Feedback.created_at.desc(), Feedback.feedback_id.desc())
        .all()
    )
    return [
        feedback.to_dict(buyer_name=buyer_name, listing_title=listing_title)
        for feedback, buyer_name, listing_title in rows
    ]


def get_average_rating(user_id):
    """Average rating received by user_id; 0 when nobody rated them yet."""
    avg_rating, count = (
        db.session.query(func.avg(Feedback.rating), func.count(Feedback.feedback_id))
        .filter(Feedback.to_user_id == user_id)
        .one()
    )
    return {
        "avgRating": round(float(avg_rating), 2) if avg_rating is not None else 0,
        "count": count,
    }
