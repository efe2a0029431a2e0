import os
import warnings
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Read an environment variable as a bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Read an environment variable as an int, falling back on bad input."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Read a comma separated environment variable as a list."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _is_production() -> bool:
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


def build_database_uri() -> str:
    """
    DATABASE_URL wins; otherwise the discrete PG* variables are assembled
    into a PostgreSQL URL. Without either, a local SQLite file is used.
    """
    url = os.environ.get("DATABASE_URL")
    if url:
        # Heroku-style URLs use the scheme SQLAlchemy dropped
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        return url

    host = os.environ.get("PGHOST")
    if not host:
        return "sqlite:///portfolio.db"
    user = quote_plus(os.environ.get("PGUSER", "postgres"))
    password = quote_plus(os.environ.get("PGPASSWORD", ""))
    database = os.environ.get("PGDATABASE", "portfolio")
    port = _get_env_int("PGPORT", 5432)
    credentials = f"{user}:{password}" if password else user
    return f"postgresql://{credentials}@{host}:{port}/{database}"


def _engine_options(uri: str) -> dict:
    if uri.startswith("sqlite"):
        return {}
    options = {
        "pool_pre_ping": True,
        "pool_size": _get_env_int("DB_POOL_SIZE", 5),
        "max_overflow": _get_env_int("DB_MAX_OVERFLOW", 10),
    }
    sslmode = os.environ.get("DB_SSLMODE", "require" if _is_production() else "")
    if sslmode:
        options["connect_args"] = {"sslmode": sslmode}
    return options


class Config:
    _PRODUCTION = _is_production()

    JWT_SECRET = os.environ.get("JWT_SECRET")
    if not JWT_SECRET:
        if _PRODUCTION:
            raise RuntimeError(
                "JWT_SECRET environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        JWT_SECRET = "dev-insecure-jwt-secret"
        warnings.warn(
            "JWT_SECRET is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=1,
        )
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_HOURS = _get_env_int("JWT_EXPIRES_HOURS", 24 * 7)
    SECRET_KEY = os.environ.get("SECRET_KEY", JWT_SECRET)

    SQLALCHEMY_DATABASE_URI = build_database_uri()
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PORT = _get_env_int("PORT", 3000)
    CORS_ORIGINS = _get_env_list("FRONTEND_URL", default=["http://localhost:5173"])
    FRONTEND_DIST = os.environ.get(
        "FRONTEND_DIST", os.path.join(os.path.dirname(os.path.dirname(__file__)), "public")
    )
    MAX_CONTENT_LENGTH = _get_env_int("MAX_CONTENT_LENGTH", 5 * 1024 * 1024)

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    EXPOSE_ERROR_DETAILS = _get_env_bool("EXPOSE_ERROR_DETAILS", default=not _PRODUCTION)

    PASSWORD_MIN_LENGTH = _get_env_int("PASSWORD_MIN_LENGTH", 6)
