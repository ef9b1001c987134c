"""Configuration management"""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Passphrase for at-rest encryption of stored credentials
    ENCRYPTION_KEY: str = "dev-local-key-change-in-production!!"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/app.db"

    # Directories
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = DATA_DIR / "logs"
    UPLOAD_DIR: Path = BASE_DIR / "uploads"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ALLOWED_ORIGINS: str = "http://localhost:3000"  # Comma-separated

    # Upstream calls (JIRA and Groq); Ollama uses its own fixed timeouts
    HTTP_TIMEOUT: float = 30.0
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"

    # Template uploads
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure directories exist
        self.DATA_DIR.mkdir(exist_ok=True, parents=True)
        self.LOGS_DIR.mkdir(exist_ok=True, parents=True)
        self.UPLOAD_DIR.mkdir(exist_ok=True, parents=True)


# Global settings instance
settings = Settings()
