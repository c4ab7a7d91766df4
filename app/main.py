"""应用入口：负责创建 FastAPI 实例并绑定生命周期事件。"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.middleware.request_id import RequestIdMiddleware
from app.packages import get_active_package

package = get_active_package()
package.setup_logging()
settings = package.get_settings()
logger = package.logger
init_db = package.init_db
create_response = package.create_response

app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)
app.add_middleware(RequestIdMiddleware)


@app.on_event("startup")
async def startup_event() -> None:
    """初始化数据库状态，确认服务可用后输出成功日志。"""
    init_db()
    logger.info("SUCCESS - Application running at http://127.0.0.1:%s", settings.app_port)


for exc_class, handler in package.exception_handlers.items():
    app.add_exception_handler(exc_class, handler)


@app.get("/")
async def root() -> dict:
    """服务信息。"""
    return {"name": settings.project_name, "version": settings.api_version, "status": "ok"}


@app.get("/health")
async def health_check() -> dict:
    """提供健康检查接口，便于编排器与监控系统探活。"""
    return create_response(status="healthy")


for mount in package.mounts:
    app.include_router(mount.router, prefix=mount.prefix)


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.app_port)
