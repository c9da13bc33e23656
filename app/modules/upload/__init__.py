from core.blueprints.base_blueprint import BaseBlueprint

upload_bp = BaseBlueprint("upload", __name__)
