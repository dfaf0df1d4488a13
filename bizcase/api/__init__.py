"""
API routes for the business case engine.
"""

from fastapi import APIRouter

from bizcase.api import analysis, calculations

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(analysis.router, prefix="/analysis", tags=["analysis"])
