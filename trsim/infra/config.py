"""Application configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./trsim.db"

    # Dice notation bounds
    dice_max_count: int = 200
    dice_max_sides: int = 100000

    # Scene
    scene_beats_total: int = 3
    rng_seed: int | None = None  # fixed seed for replayable sessions

    # Session log
    log_max_entries: int = 800

    # App
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "TRSIM_"}


settings = Settings()
