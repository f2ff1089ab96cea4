import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("ESGSCOPE_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    environment: str
    database_url: str
    storage_backend: str
    server_name: str
    server_version: str
    server_description: str
    log_level: str
    seed_on_startup: bool

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get(
                "DATABASE_URL", "postgresql://localhost:5432/esgscope"
            ),
            storage_backend=os.environ.get("STORAGE_BACKEND", "memory").lower(),
            server_name=os.environ.get("SERVER_NAME", "ESGScope Investment API"),
            server_version=os.environ.get("SERVER_VERSION", "1.0.0"),
            server_description=os.environ.get(
                "SERVER_DESCRIPTION",
                "Investment analysis API with ESG scoring and automated insights",
            ),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            seed_on_startup=_env_flag("SEED_ON_STARTUP", default=env == "development"),
        )


config = Config.from_env()
