from campus_exchange.models.user import User
from campus_exchange.models.listing import Listing
from campus_exchange.models.transaction import Transaction
from campus_exchange.models.feedback import Feedback

__all__ = ["User", "Listing", "Transaction", "Feedback"]
