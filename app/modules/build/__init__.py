from core.blueprints.base_blueprint import BaseBlueprint

build_bp = BaseBlueprint("build", __name__)
