"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量，便于在本地/生产之间切换。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """核心配置项。

    - ``database_url``：默认使用本地 SQLite，便于快速启动。
    - ``log_level``：根日志级别，传给 ``setup_logging``。
    - ``default_min_passing_grade``：新建科目时的默认及格线（仅用于展示）。
    - ``strict_grading``：``/grades/compute`` 默认是否拒绝不合法输入。
    """

    database_url: str = Field(
        default="sqlite:///./storage/gradetrack.db", description="SQLAlchemy 数据库 URL"
    )
    log_level: str = Field(default="INFO", description="日志级别")
    default_min_passing_grade: float = Field(
        default=61, ge=0, le=100, description="科目默认及格线"
    )
    strict_grading: bool = Field(
        default=False, description="成绩计算接口是否默认开启严格校验"
    )

    model_config = {
        "env_prefix": "GRADETRACK_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()
