"""API 汇总路由：统一挂载 ``/api`` 下的子路由与根路径下的公开访问路由。"""

from fastapi import APIRouter

from app.packages.media.api.v1.endpoints import auth, fallback, files, public, upload

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(upload.router)
api_router.include_router(files.router)
api_router.include_router(fallback.router)

public_router = public.router
