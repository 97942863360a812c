from fastapi import APIRouter

from dbcreds.api.routes import config, creds, roles, utils

api_router = APIRouter()
api_router.include_router(utils.router)
api_router.include_router(config.router)
api_router.include_router(roles.router)
api_router.include_router(creds.router)
