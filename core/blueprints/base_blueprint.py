import logging
import os

from flask import Blueprint, request


class BaseBlueprint(Blueprint):
    def __init__(self, name, import_name, url_prefix=None, **kwargs):
        super().__init__(name, import_name, url_prefix=url_prefix, **kwargs)
        self.module_path = os.path.join("app", "modules", name)
        self.logger = logging.getLogger(import_name)
        self.before_request(self._log_request)

    def _log_request(self):
        self.logger.debug("[%s] %s %s", self.name, request.method, request.path)
