from datetime import datetime, timezone

from campus_exchange.extensions import db


class Feedback(db.Model):
    __tablename__ = 'feedback'
    __table_args__ = (
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_feedback_rating_range'),
    )

    feedback_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    from_user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False)
    to_user_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=False, index=True)
    listing_id = db.Column(db.Integer, db.ForeignKey('listings.listing_id'), nullable=True)
    rating = db.Column(db.Integer, nullable=False)
    comments = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    def to_dict(self, buyer_name=None, listing_title=None):
        return {
            'FeedbackId': self.feedback_id,
            'Rating': self.rating,
            'Comments': self.comments,
            'BuyerName': buyer_name,
            'ListingTitle': listing_title,
            'CreatedAt': self.created_at.isoformat() if self.created_at else None,
        }
