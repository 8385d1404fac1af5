"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from joyhomes.api.v1 import (
    activity_logs,
    auth,
    bookings,
    customers,
    inventory,
    reports,
    transactions,
    users,
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["Users"])

# Customers
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])

# Inventory
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Transactions
api_router.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])

# Activity
api_router.include_router(activity_logs.router, prefix="/activity-logs", tags=["Activity"])

# Reports
api_router.include_router(reports.router, prefix="/reports", tags=["Reports"])
