from typing import Literal

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "FoodFlow Runtime"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Process / task runtime
    DEFAULT_TASK_PRIORITY: int = 50
    # False keeps the permissive behaviour: forbidden instance transitions still apply
    STRICT_TRANSITIONS: bool = False

    # LOT numbering: YYYYMMDD-<productId>-<3-digit sequence>
    LOT_SEQUENCE_STRATEGY: Literal["random", "sequential"] = "random"
    LOT_COLLISION_RETRIES: int = 0

    # HACCP
    CCP_CODE_PREFIX: str = "CCP"
    AUTO_ACTION_RESULT: str = "Executed automatically"
    SYSTEM_ACTOR: str = "SYSTEM"

    model_config = ConfigDict(env_file=".env", env_prefix="FOODFLOW_", case_sensitive=True)


settings = Settings()
