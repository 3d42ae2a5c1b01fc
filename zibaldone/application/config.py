"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    app_name: str = "zibaldone"
    app_version: str = "0.1.0"
    debug: bool = False

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Book repository on disk
    repo_root: str = "../books"
    manuscript_dir: str = "manuscript"
    render_dir: str = "render"
    allowed_extensions: list[str] = ["txt", "md"]
    sentinel_filename: str = "Book.txt"
    render_timestamp_format: str = "%a, %Y-%m-%d %H:%M:%S"

    # Record store: "local" (in-memory) or "dynamodb"
    record_store_type: str = "local"

    # AWS settings for the DynamoDB record store
    aws_region: str = "us-east-1"
    books_table_name: str = "Books"
    fragments_table_name: str = "Fragments"
    references_table_name: str = "References"


# Create a singleton instance
settings = Settings()
