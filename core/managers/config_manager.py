import os

from dotenv import load_dotenv

# Class-level settings below read the environment at import time
load_dotenv()


def _database_uri():
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")
    if os.getenv("MARIADB_HOSTNAME"):
        return (
            f"mysql+pymysql://{os.getenv('MARIADB_USER', 'default_user')}:"
            f"{os.getenv('MARIADB_PASSWORD', 'default_password')}@"
            f"{os.getenv('MARIADB_HOSTNAME')}:"
            f"{os.getenv('MARIADB_PORT', '3306')}/"
            f"{os.getenv('MARIADB_DATABASE', 'default_db')}"
        )
    return "sqlite:///indiehub.db"


class ConfigManager:
    def __init__(self, app):
        self.app = app

    def load_config(self, config_name="development"):
        if config_name == "testing":
            self.app.config.from_object(TestingConfig)
        elif config_name == "production":
            self.app.config.from_object(ProductionConfig)
        else:
            self.app.config.from_object(DevelopmentConfig)


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TIMEZONE = "Europe/Madrid"
    TEMPLATES_AUTO_RELOAD = True
    UPLOAD_FOLDER = "uploads"
    JSON_SORT_KEYS = False
    LOG_FILE = os.getenv("LOG_FILE", "app.log")
    UPLOAD_WORKERS = int(os.getenv("UPLOAD_WORKERS", "4"))
    # Multipart bodies above this are refused by Werkzeug before validation runs.
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 600 * 1024 * 1024))
    SESSION_COOKIE_SAMESITE = "Lax"
    REMEMBER_COOKIE_SAMESITE = "Lax"
    WTF_CSRF_TIME_LIMIT = None


class DevelopmentConfig(Config):
    DEBUG = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite://")
    WTF_CSRF_ENABLED = False
    LOG_FILE = None


class ProductionConfig(Config):
    DEBUG = False
