from fastapi import APIRouter

from jobly.api.routes import health, jobs, organizations, users

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(organizations.router, prefix="/organizations", tags=["organizations"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
