import logging
from logging.handlers import RotatingFileHandler


class LoggingManager:
    def __init__(self, app):
        self.app = app

    def setup_logging(self):
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        log_file = self.app.config.get("LOG_FILE")
        if log_file:
            file_handler = RotatingFileHandler(log_file, maxBytes=10240, backupCount=10)
            file_handler.setLevel(logging.ERROR)
            file_handler.setFormatter(formatter)
            self.app.logger.addHandler(file_handler)

        if self.app.debug:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(formatter)
            self.app.logger.addHandler(console_handler)
            logging.getLogger("app").setLevel(logging.INFO)
            logging.getLogger("app").addHandler(console_handler)

        self.app.logger.setLevel(logging.INFO)
