from core.blueprints.base_blueprint import BaseBlueprint

library_bp = BaseBlueprint("library", __name__)
