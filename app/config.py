import os

class BaseConfig:
    JSON_SORT_KEYS = False
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "*")
    RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
    DEFAULT_RATE_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "200 per hour")
    LOGIN_LIMIT_PER_IP = os.getenv("LOGIN_LIMIT_PER_IP", "10 per 30 minutes")
    RECOVERY_LIMIT_PER_IP = os.getenv("RECOVERY_LIMIT_PER_IP", "5 per 15 minutes")
    ORDER_LIMIT_PER_IP = os.getenv("ORDER_LIMIT_PER_IP", "20 per hour")
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-insecure-jwt-key")
    ACCESS_TOKEN_LIFETIME_MIN = int(os.getenv("ACCESS_TOKEN_LIFETIME_MIN", 15))
    REFRESH_TOKEN_LIFETIME_DAYS = int(os.getenv("REFRESH_TOKEN_LIFETIME_DAYS", 30))
    PASSWORD_RESET_LIFETIME_MIN = int(os.getenv("PASSWORD_RESET_LIFETIME_MIN", 60))
    STORAGE_ROOT = os.getenv("STORAGE_ROOT", os.path.join(os.getcwd(), "storage"))
    PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", 6 * 1024 * 1024))
    CART_IDLE_MINUTES = int(os.getenv("CART_IDLE_MINUTES", 120))
    REALTIME_DEBOUNCE_SECONDS = float(os.getenv("REALTIME_DEBOUNCE_SECONDS", 0.25))
    REALTIME_MAX_WAIT_SECONDS = float(os.getenv("REALTIME_MAX_WAIT_SECONDS", 2))
    REALTIME_KEEPALIVE_SECONDS = float(os.getenv("REALTIME_KEEPALIVE_SECONDS", 15))
    OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "pratodigital-backend")
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces")

class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dev.db")

class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-key"
    JWT_SECRET = "test-jwt-secret"
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    DEFAULT_RATE_LIMIT = "10000 per hour"
    LOGIN_LIMIT_PER_IP = "1000 per hour"
    RECOVERY_LIMIT_PER_IP = "1000 per hour"
    ORDER_LIMIT_PER_IP = "1000 per hour"
    REALTIME_DEBOUNCE_SECONDS = 0.05
    REALTIME_MAX_WAIT_SECONDS = 0.5
    REALTIME_KEEPALIVE_SECONDS = 0.2

class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False
    SECRET_KEY = os.getenv("SECRET_KEY")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")

    @staticmethod
    def validate():
        missing = []
        for key in ("SECRET_KEY", "DATABASE_URL", "JWT_SECRET"):
            if not os.getenv(key):
                missing.append(key)
        if missing:
            raise RuntimeError(
                f"Missing required env vars in production: {', '.join(missing)}"
            )

def get_config_class():
    env = os.getenv("APP_ENV", "development").lower()
    if env == "production":
        ProductionConfig.validate()
        return ProductionConfig
    if env == "testing":
        return TestingConfig
    return DevelopmentConfig
