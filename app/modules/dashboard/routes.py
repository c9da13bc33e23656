from flask import jsonify, request
from flask_login import current_user, login_required

from app.modules.dashboard import dashboard_bp
from app.modules.game.models import GameStatus
from app.modules.game.services import GameService


@dashboard_bp.route("/dashboard/projects", methods=["GET"])
@login_required
def my_projects():
    games = GameService().get_by_developer(current_user.id)
    status = request.args.get("status", "").strip().lower()
    if status:
        try:
            wanted = GameStatus.parse(status)
        except ValueError as exc:
            return jsonify({"message": str(exc)}), 400
        games = [game for game in games if game.status == wanted]
    return jsonify({"items": [game.to_dict() for game in games], "count": len(games)}), 200


@dashboard_bp.route("/dashboard/summary", methods=["GET"])
@login_required
def summary():
    return jsonify(GameService().developer_summary(current_user.id)), 200
