"""Database models."""

from joyhomes.models.activity import ActivityLog
from joyhomes.models.booking import Booking, Transaction
from joyhomes.models.customer import Customer
from joyhomes.models.inventory import Project, Property
from joyhomes.models.user import User

__all__ = [
    # User
    "User",
    # Customer
    "Customer",
    # Inventory
    "Project",
    "Property",
    # Booking
    "Booking",
    "Transaction",
    # Activity
    "ActivityLog",
]
