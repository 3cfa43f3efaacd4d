"""API router composition for all route groups."""

from fastapi import APIRouter

from .routes import agent

api_router = APIRouter()
api_router.include_router(agent.router, tags=["agent"])
