from fastapi import APIRouter

from policydesk.api.v1.auth import router as auth_router
from policydesk.api.v1.contracts import router as contracts_router
from policydesk.api.v1.imports import router as imports_router
from policydesk.api.v1.tasks import router as tasks_router
from policydesk.api.v1.users import router as users_router

v1_router = APIRouter()

v1_router.include_router(auth_router)
v1_router.include_router(contracts_router)
v1_router.include_router(imports_router)
v1_router.include_router(tasks_router)
v1_router.include_router(users_router)
