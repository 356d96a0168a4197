# globetrotter/routes/__init__.py
from fastapi import APIRouter
from globetrotter.routes.auth import auth, profile
from globetrotter.routes.trip import trip_routes, stop_routes
from globetrotter.routes.itineraries import activity_routes
from globetrotter.routes.budget import budget_routes
from globetrotter.routes.ai import ai_routes


api_router = APIRouter(prefix="/api")

# Auth routes
api_router.include_router(auth.router)
api_router.include_router(profile.router)

# Trip routes
api_router.include_router(trip_routes.router)
api_router.include_router(stop_routes.router)

# Itinerary routes
api_router.include_router(activity_routes.router)
api_router.include_router(budget_routes.router)

# AI planner
api_router.include_router(ai_routes.router)
