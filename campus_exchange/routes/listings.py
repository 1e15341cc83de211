from flask import Blueprint, jsonify, request

from campus_exchange.services.listing_service import (
    create_listing,
    get_available_listings,
    get_listing,
)
from campus_exchange.validators import (
    json_body,
    optional_text,
    parse_amount,
    parse_id,
    require_fields,
)

listings_bp = Blueprint('listings', __name__)


@listings_bp.route('/listings', methods=['GET'])
def list_listings():
    """
    List every listing still available, newest first
    ---
    tags:
      - Listings
    responses:
      200:
        description: Array of available listings, each with SellerName
      500:
        description: Storage error
    """
    return jsonify(get_available_listings()), 200


@listings_bp.route('/listings/<int:listing_id>', methods=['GET'])
def get_single_listing(listing_id):
    """
    Get one listing, whatever its status
    ---
    tags:
      - Listings
    parameters:
      - name: listing_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Listing details
      404:
        description: Listing not found
    """
    return jsonify(get_listing(listing_id).to_dict()), 200


@listings_bp.route('/add-listing', methods=['POST'])
def add_listing():
    """
    Put an item up for sale
    ---
    tags:
      - Listings
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - sellerId
            - title
            - price
          properties:
            sellerId:
              type: integer
            title:
              type: string
            description:
              type: string
            price:
              type: number
            itemCondition:
              type: string
              default: Good
    responses:
      200:
        description: Listing added
      400:
        description: Missing or invalid fields
      404:
        description: Seller not found
    """
    data = json_body(request)
    require_fields(data, ['sellerId', 'title', 'price'])

    listing = create_listing(
        seller_id=parse_id(data['sellerId'], 'sellerId'),
        title=str(data['title']).strip(),
        price=parse_amount(data['price'], 'price'),
        description=optional_text(data.get('description')),
        item_condition=optional_text(data.get('itemCondition')),
    )
    return jsonify({'message': 'Listing added', 'listingId': listing.listing_id}), 200
