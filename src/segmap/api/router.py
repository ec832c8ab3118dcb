"""Main router aggregation."""

from fastapi import APIRouter

from segmap.api.security_map import router as security_map_router
from segmap.dependencies import Authorized

api_router = APIRouter()

api_router.include_router(
    security_map_router, prefix="/security-map", tags=["security-map"], dependencies=[Authorized]
)
