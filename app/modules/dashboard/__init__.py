from core.blueprints.base_blueprint import BaseBlueprint

dashboard_bp = BaseBlueprint("dashboard", __name__)
