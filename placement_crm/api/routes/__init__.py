"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placement_crm.api.routes.auth_routes import router as auth_router
from placement_crm.api.routes.role_routes import router as role_router
from placement_crm.api.routes.user_routes import router as user_router
from placement_crm.api.routes.facility_routes import router as facility_router
from placement_crm.api.routes.facility_supervisor_routes import router as facility_supervisor_router
from placement_crm.api.routes.placement_executive_routes import router as placement_executive_router
from placement_crm.api.routes.trainer_routes import router as trainer_router
from placement_crm.api.routes.student_routes import router as student_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(role_router)
api_router.include_router(user_router)
api_router.include_router(facility_router)
api_router.include_router(facility_supervisor_router)
api_router.include_router(placement_executive_router)
api_router.include_router(trainer_router)
api_router.include_router(student_router)
