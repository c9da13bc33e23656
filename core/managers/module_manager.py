import importlib
import logging
import os

from flask import Blueprint

logger = logging.getLogger(__name__)


class ModuleManager:
    def __init__(self, app):
        self.app = app
        self.modules_dir = os.path.join(app.root_path, "modules")
        self.ignored_modules_file = os.path.join(os.path.dirname(app.root_path), ".moduleignore")
        self.ignored_modules = self._load_ignored_modules()

    def _load_ignored_modules(self):
        if not os.path.exists(self.ignored_modules_file):
            return []
        with open(self.ignored_modules_file) as f:
            return [line.strip() for line in f if line.strip() and not line.startswith("#")]

    def module_names(self):
        names = []
        for module_name in sorted(os.listdir(self.modules_dir)):
            module_path = os.path.join(self.modules_dir, module_name)
            if (
                os.path.isdir(module_path)
                and not module_name.startswith("__")
                and module_name not in self.ignored_modules
                and os.path.exists(os.path.join(module_path, "__init__.py"))
            ):
                names.append(module_name)
        return names

    def register_modules(self):
        self.app.modules = {}
        self.app.blueprint_url_prefixes = {}
        for module_name in self.module_names():
            module = importlib.import_module(f"app.modules.{module_name}")
            self.app.modules[module_name] = module
            importlib.import_module(f"app.modules.{module_name}.routes")
            blueprint = getattr(module, f"{module_name}_bp", None)
            if isinstance(blueprint, Blueprint):
                self.app.register_blueprint(blueprint)
                logger.debug("Registered blueprint '%s'", blueprint.name)
            else:
                logger.warning("Module '%s' does not expose a '%s_bp' blueprint", module_name, module_name)

    def seeders(self):
        """Return an instance of every seeder found in the modules, sorted by priority."""
        from core.seeders.BaseSeeder import BaseSeeder

        found = []
        for module_name in self.module_names():
            seeders_path = os.path.join(self.modules_dir, module_name, "seeders.py")
            if not os.path.exists(seeders_path):
                continue
            module = importlib.import_module(f"app.modules.{module_name}.seeders")
            for attr in vars(module).values():
                if isinstance(attr, type) and issubclass(attr, BaseSeeder) and attr is not BaseSeeder:
                    if attr.__module__ == module.__name__:
                        found.append(attr())
        return sorted(found, key=lambda seeder: seeder.priority)
