"""
Application configuration
Reads settings from environment variables
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Travel Recommendation Service"
    DEBUG: bool = False
    PORT: int = 8080
    ENABLE_CRON: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "travel"

    # Recommendation defaults (per-call options override these)
    RECOMMENDATION_MAX_RESULTS: int = 20
    RECOMMENDATION_MIN_SCORE: float = 0.1
    RECOMMENDATION_DIVERSITY_FACTOR: float = 0.3
    RECOMMENDATION_GEO_RADIUS_METERS: float = 50000.0
    RECOMMENDATION_TIMEOUT_SECONDS: float = 5.0

    # Profile cache
    PROFILE_CACHE_TTL: int = 300  # 5 minutes
    PROFILE_CACHE_MAX_SIZE: int = 1000
    INTERACTION_HISTORY_LIMIT: int = 100

    # Peer discovery
    MAX_SIMILAR_USERS: int = 10
    USER_SIMILARITY_THRESHOLD: float = 0.3

    # Trending
    TRENDING_WINDOW_DAYS: int = 7

    # Cached results
    RECOMMENDATION_CACHE_TTL: int = 86400  # 24 hours
    RECOMMENDATION_CACHE_TOP_N: int = 10

    # Candidate retrieval
    MAX_CANDIDATE_PLACES: int = 100
    MAX_CANDIDATE_TRIPS: int = 50

    @property
    def DATABASE_URL(self) -> str:
        """Construct database URL"""
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
