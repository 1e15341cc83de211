from datetime import datetime, timezone

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from campus_exchange.extensions import db

health_bp = Blueprint('health', __name__)


@health_bp.route('/', methods=['GET'])
def index():
    return "Campus Exchange API running"


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy
      503:
        description: Service is unhealthy (DB connection failed)
    """
    try:
        db.session.execute(text('SELECT 1'))
    except SQLAlchemyError:
        db.session.rollback()
        return jsonify({
            "service": "campus-exchange",
            "status": "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }), 503
    return jsonify({
        "service": "campus-exchange",
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }), 200
