"""Main v1 router aggregator"""
from fastapi import APIRouter

from tripledger.api.v1 import budgets, cards, expenses, participants, trips, users

# Create v1 router
api_router = APIRouter()

# Include all v1 routers
api_router.include_router(users.router)
api_router.include_router(trips.router)
api_router.include_router(participants.router)
api_router.include_router(budgets.router)
api_router.include_router(expenses.router)
api_router.include_router(cards.router)
