from core.blueprints.base_blueprint import BaseBlueprint

catalog_bp = BaseBlueprint("catalog", __name__)
