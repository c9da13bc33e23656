from core.blueprints.base_blueprint import BaseBlueprint

game_bp = BaseBlueprint("game", __name__)
