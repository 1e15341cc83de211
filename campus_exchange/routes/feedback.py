from flask import Blueprint, jsonify, request

from campus_exchange.services.feedback_service import (
    get_average_rating,
    get_feedback_for_user,
    record_feedback,
)
from campus_exchange.validators import (
    json_body,
    optional_text,
    parse_id,
    parse_rating,
    require_fields,
)

feedback_bp = Blueprint('feedback', __name__)


@feedback_bp.route('/feedback', methods=['POST'])
def add_feedback():
    """
    Leave a rating for another user
    ---
    tags:
      - Feedback
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - fromUserId
            - toUserId
            - rating
          properties:
            fromUserId:
              type: integer
            toUserId:
              type: integer
            listingId:
              type: integer
            rating:
              type: integer
              minimum: 1
              maximum: 5
            comments:
              type: string
    responses:
      200:
        description: Feedback saved
      400:
        description: Missing fields or rating out of range
      404:
        description: Unknown user or listing
    """
    data = json_body(request)
    require_fields(data, ['fromUserId', 'toUserId', 'rating'])

    rating = parse_rating(data['rating'])
    from_user_id = parse_id(data['fromUserId'], 'fromUserId')
    to_user_id = parse_id(data['toUserId'], 'toUserId')
    listing_id = data.get('listingId')
    if listing_id in (None, ''):
        listing_id = None
    else:
        listing_id = parse_id(listing_id, 'listingId')

    feedback = record_feedback(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        rating=rating,
        listing_id=listing_id,
        comments=optional_text(data.get('comments')),
    )
    return jsonify({'message': 'Feedback saved', 'feedbackId': feedback.feedback_id}), 200


@feedback_bp.route('/feedback/seller/<int:user_id>', methods=['GET'])
def list_feedback_for_seller(user_id):
    """
    All feedback a user has received, newest first
    ---
    tags:
      - Feedback
    parameters:
      - name: user_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Array of feedback entries with BuyerName and ListingTitle
      500:
        description: Storage error
    """
    return jsonify(get_feedback_for_user(user_id)), 200


@feedback_bp.route('/rating/<int:user_id>', methods=['GET'])
def average_rating(user_id):
    """
    Average rating a user has received
    ---
    tags:
      - Feedback
    parameters:
      - name: user_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: avgRating (0 when unrated) and count
    """
    return jsonify(get_average_rating(user_id)), 200
