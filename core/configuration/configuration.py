import os

DEFAULT_UPLOAD_MAX_BYTES = 500 * 1024 * 1024


def uploads_folder_name():
    return os.getenv("UPLOADS_DIR", "uploads")


def upload_max_bytes() -> int:
    return int(os.getenv("UPLOAD_MAX_BYTES", DEFAULT_UPLOAD_MAX_BYTES))


def upload_workers() -> int:
    return int(os.getenv("UPLOAD_WORKERS", "4"))


def storage_public_host():
    return os.getenv("STORAGE_PUBLIC_HOST", "localhost:5000")


def storage_download_route():
    return os.getenv("STORAGE_DOWNLOAD_ROUTE", "builds/download").strip("/")


def is_develop():
    flask_env = os.getenv("FLASK_ENV", "development")
    return flask_env == "development"


def is_production():
    return os.getenv("FLASK_ENV", "development") == "production"


def get_app_version():
    return os.getenv("APP_VERSION", "0.1.0")
