"""
Configuration settings for the workflow compiler.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Compiler settings
    max_schema_depth: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting depth translated before falling back to a permissive schema"
    )
    render_source_by_default: bool = Field(
        default=False,
        description="Render the generated Python module alongside the compiled pipeline"
    )

    # Compile result cache (keyed by workflow content hash)
    compile_cache_ttl: int = Field(
        default=300,
        description="Seconds a cached compile result stays valid"
    )
    compile_cache_max_entries: int = Field(
        default=256,
        description="Maximum number of compile results kept in the cache"
    )

    # Application settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="detailed",
        description="Log format style: simple, detailed or json"
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Create global settings instance
settings = Settings()
