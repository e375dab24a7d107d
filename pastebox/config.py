import os


def _sqlite_uri(db_path: str) -> str:
    return f"sqlite:///{db_path}"


class BaseConfig:
    """Base application configuration shared across environments."""

    APP_NAME: str = "pastebox"

    # HTTP
    PORT: int = int(os.getenv("PORT", "8080"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # Admin credentials (single shared operator account)
    AUTH_USER: str = os.getenv("AUTH_USER", "admin")
    AUTH_PASS: str = os.getenv("AUTH_PASS", "changeme")
    ADMIN_REALM: str = "Admin Area"
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Database
    DB_PATH: str = os.getenv("DB_PATH", "./pastes.db")
    SQLALCHEMY_DATABASE_URI: str = _sqlite_uri(DB_PATH)
    SQLALCHEMY_ECHO: bool = False

    # Pastes
    PASTE_ID_ATTEMPTS: int = int(os.getenv("PASTE_ID_ATTEMPTS", "3"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    TESTING: bool = False
    DEBUG: bool = False


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    BCRYPT_ROUNDS = 4

    AUTH_USER = "admin"
    AUTH_PASS = "changeme"
    SQLALCHEMY_DATABASE_URI: str = "sqlite+pysqlite:///:memory:"


CONFIG_BY_NAME = {
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
}


def get_config(env_name: str | None) -> type[BaseConfig]:
    """Return a config class for the given environment name."""
    if not env_name:
        return DevelopmentConfig
    return CONFIG_BY_NAME.get(env_name, DevelopmentConfig)
