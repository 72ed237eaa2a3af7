"""FastAPI 应用入口。"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chaff.clock import Clock
from chaff.config import Settings, get_settings
from chaff.database.async_session import (
    create_tables,
    dispose_engine,
    get_async_session_maker,
)
from chaff.endpoints.client import EndpointClient
from chaff.monitoring.middleware import PrometheusMiddleware
from chaff.scheduler_accessor import get_host, register_host, unregister_host
from chaff.schedule.coordinator import ExecutionCoordinator
from chaff.schedule.services.schedule_service import ScheduleService
from chaff.schedule.state import SchedulerState
from chaff.schedule.triggers import TriggerHost
from chaff.storage.state_store import StateStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """按配置初始化根日志记录器。"""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # APScheduler 的任务执行日志过于频繁
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001 - app 参数是 FastAPI 要求的
    """应用生命周期管理。

    启动时创建数据库表、加载持久化状态、启动触发宿主并执行恢复检查。
    关闭时停止触发宿主并释放连接。
    """
    settings = get_settings()
    configure_logging(settings)

    await create_tables()

    store = StateStore(get_async_session_maker())
    state = await store.load_into(SchedulerState.from_settings(settings))

    clock = Clock(settings.timezone)
    client = EndpointClient(
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
    )
    coordinator = ExecutionCoordinator(state, settings, clock, client, store=store)

    host: TriggerHost | None = None
    if settings.scheduler_enabled:
        host = TriggerHost(coordinator, settings)
        host.start()
        register_host(host)
        logger.info("调度器已启动")
    else:
        logger.info("调度器未启用，仅处理手动触发")

    app.state.coordinator = coordinator
    app.state.schedule_service = ScheduleService(coordinator, host)

    # 启动即视为一次应用恢复：过期的触发时间立即补执行
    result = await coordinator.check_resume()
    logger.info(f"启动检查完成: {result.status.value}")

    yield

    # 关闭时的清理工作
    if host is not None:
        unregister_host()
        host.shutdown()
    await client.close()
    await dispose_engine()
    logger.info("应用已关闭")


# 创建 FastAPI 应用
app = FastAPI(
    title="Chaff",
    description="随机化诱饵请求调度服务",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()

# 配置 CORS 中间件，供展示层跨域调用
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus 监控中间件（在 CORS 之后）
if settings.prometheus_enabled:
    app.add_middleware(PrometheusMiddleware)


@app.get("/health")
async def health_check():
    """健康检查端点。

    检查数据库连接和调度器状态，返回各组件健康信息。
    始终返回 HTTP 200 以兼容 Docker HEALTHCHECK。
    """
    from sqlalchemy import text

    components = {}

    # 1. 数据库连接检查
    try:
        session_maker = get_async_session_maker()
        async with session_maker() as session:
            await session.execute(text("SELECT 1"))
        components["database"] = {"status": "healthy"}
    except Exception as e:
        components["database"] = {"status": "unhealthy", "error": str(e)}

    # 2. 调度器状态检查
    host = get_host()
    if host is not None:
        jobs = host.scheduler.get_jobs()
        components["scheduler"] = {
            "status": "healthy" if host.running else "unhealthy",
            "running": host.running,
            "jobs": len(jobs),
        }
    else:
        components["scheduler"] = {"status": "unhealthy", "error": "not initialized"}

    # 3. 整体状态判定
    overall = "healthy"
    if any(c["status"] == "unhealthy" for c in components.values()):
        overall = "degraded"

    return {"status": overall, "components": components}


# 注册 API 路由
from chaff.schedule.api.routes import router as schedule_router  # noqa: E402

app.include_router(schedule_router)

# 注册 Prometheus 监控路由
from chaff.monitoring import routes as monitoring_routes  # noqa: E402

app.include_router(monitoring_routes.router)


def main():
    """主函数 - 用于开发服务器启动。"""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "chaff.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
