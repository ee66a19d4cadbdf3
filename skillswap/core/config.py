from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Placeholder secret; a production deployment must override it
DEFAULT_JWT_SECRET = "your-secret-key"

class Settings(BaseSettings):
    app_name: str = "SkillSwap API"
    debug: bool = False
    environment: str = "production"
    api_v1_prefix: str = "/api/v1"
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    # "supabase" for the hosted backend, "memory" for local development
    store_backend: str = "supabase"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None

    # Supabase signs access tokens with the project JWT secret
    supabase_jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    jwt_expiration_minutes: int = 30

    unique_ratings: bool = True
    maintain_rating_aggregate: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def check_production_secrets(self) -> None:
        """
        Raises:
            RuntimeError: Running in production with the placeholder JWT secret
        """
        if self.is_production and self.supabase_jwt_secret == DEFAULT_JWT_SECRET:
            raise RuntimeError("SUPABASE_JWT_SECRET must be set in production")

@lru_cache()
def get_settings() -> Settings:
    return Settings()
