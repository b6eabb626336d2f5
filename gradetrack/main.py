"""FastAPI 入口，负责日志、建表、路由注册与异常映射。"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from gradetrack import models  # noqa: F401  注册全部表
from gradetrack.api.v2 import router as api_v2_router
from gradetrack.config import get_settings
from gradetrack.db import Base, engine
from gradetrack.logging_config import setup_logging
from gradetrack.services.validation import GradingError

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """应用工厂，便于测试与拓展路由。"""

    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title="GradeTrack API", version="0.1.0")

    @app.on_event("startup")
    def init_models() -> None:
        """启动时确保表存在。"""

        Base.metadata.create_all(bind=engine)
        logger.info("database ready: %s", engine.url.render_as_string(hide_password=True))

    @app.exception_handler(GradingError)
    async def grading_error_handler(request: Request, exc: GradingError) -> JSONResponse:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "code": exc.code, "target": exc.target},
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "database": engine.url.render_as_string(hide_password=True)}

    app.include_router(api_v2_router)
    return app


app = create_app()
