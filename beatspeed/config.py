"""Application configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine defaults with env var overrides."""

    # Analysis
    time_interval_ms: int = 1000  # spacing between estimates
    analysis_interval_ms: int = 3000  # length of each analysed segment
    min_bpm: float = 80.0
    max_bpm: float = 160.0
    verbose: int = 1

    # Engine
    max_workers: int | None = None  # None -> os.cpu_count()
    decode_block_size: int = 65536  # frames per decoded block
    event_queue_size: int = 0  # 0 -> unbounded EventStream

    model_config = {"env_prefix": "BEATSPEED_"}


settings = Settings()
