from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".flashdeck" / "data"
    sqlite_filename: str = "flashdeck.db"
    host: str = "127.0.0.1"
    port: int = 0  # 0 = any free port
    log_level: str = "warning"
    session_limit_default: int = 20
    max_sessions: int = 256
    seed_demo_deck: bool = False

    model_config = {"env_prefix": "FLASHDECK_"}


settings = Settings()
