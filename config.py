import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library configuration loaded from FITPIX_* environment variables."""

    # --- Convergent Search ---
    quality_step: float = 0.1
    min_quality: float = 0.25
    max_search_iterations: int = 10

    # --- Batch ---
    batch_max_workers: int = 0  # 0 = min(CPU count, 4)

    # --- Facade Defaults ---
    default_preset: str = "community"
    should_optimize_threshold_kb: int = 500
    progressive_jpeg: bool = False

    # --- Source Limits ---
    max_file_size_mb: int = 32
    max_file_size_bytes: int = 0  # Computed in model_post_init

    # --- URL Fetching ---
    url_fetch_timeout: int = 30
    url_fetch_max_redirects: int = 5

    # --- Logging ---
    log_level: str = "ERROR"

    model_config = {"env_prefix": "FITPIX_", "case_sensitive": False}

    def model_post_init(self, __context) -> None:
        if self.max_file_size_bytes == 0:
            self.max_file_size_bytes = self.max_file_size_mb * 1024 * 1024
        if self.batch_max_workers == 0:
            # Each worker may hold a decoded bitmap; keep the pool small.
            self.batch_max_workers = min(os.cpu_count() or 1, 4)


settings = Settings()
