"""
Purchase Routes
POST /purchase: buy a listing. The whole check-and-sell runs in one locked
database transaction (see services.purchase_service).
"""

from flask import Blueprint, jsonify, request

from campus_exchange.services.purchase_service import purchase_listing
from campus_exchange.validators import (
    json_body,
    optional_text,
    parse_amount,
    parse_id,
    require_fields,
)

purchase_bp = Blueprint('purchase', __name__)


@purchase_bp.route('/purchase', methods=['POST'])
def purchase():
    """
    Buy a listing
    ---
    tags:
      - Purchase
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - listingId
            - buyerId
            - amount
          properties:
            listingId:
              type: integer
            buyerId:
              type: integer
            amount:
              type: number
            paymentMethod:
              type: string
              default: UPI
    responses:
      200:
        description: Purchase successful
      400:
        description: Missing fields, item already sold, or buying your own listing
      404:
        description: Listing or buyer not found
    """
    data = json_body(request)
    require_fields(data, ['listingId', 'buyerId', 'amount'])

    receipt = purchase_listing(
        listing_id=parse_id(data['listingId'], 'listingId'),
        buyer_id=parse_id(data['buyerId'], 'buyerId'),
        amount=parse_amount(data['amount'], 'amount'),
        payment_method=optional_text(data.get('paymentMethod')),
    )
    return jsonify({
        'message': 'Purchase successful',
        'transactionId': receipt['TransactionId'],
    }), 200
