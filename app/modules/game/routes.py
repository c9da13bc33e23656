import logging

from flask import jsonify, request
from flask_login import login_required

from app.modules.auth.services import authentication_service
from app.modules.build.services import BuildService
from app.modules.game import game_bp
from app.modules.game.forms import GameForm, GameStatusForm
from app.modules.game.services import GameService
from app.modules.upload.services import upload_registry

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")


def _flag(name) -> bool:
    payload = request.get_json(silent=True) or {}
    value = payload.get(name, request.values.get(name, ""))
    return str(value).strip().lower() in TRUE_VALUES


def _required_platforms():
    payload = request.get_json(silent=True) or {}
    if "required_platforms" in payload:
        return payload.get("required_platforms") or []
    return request.values.getlist("required_platforms")


@game_bp.route("/games", methods=["POST"])
@login_required
def submit_game():
    form = GameForm()
    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400

    auth = authentication_service.current_context()
    tracker = upload_registry.tracker_for(auth)
    if not tracker.completed_units():
        return jsonify({"message": "Upload at least one game build before submitting"}), 400

    warning = tracker.finalize_warning(_required_platforms())
    if warning is not None and not _flag("confirm_incomplete"):
        return jsonify(warning.to_dict()), 409

    game_service = GameService()
    game = game_service.create_game(auth, **form.get_game_data())
    builds = tracker.finalize(game.id, BuildService())
    logger.info("Game %s submitted with %d build(s)", game.id, len(builds))
    return jsonify(game.to_dict(include_builds=True)), 201


@game_bp.route("/games/<int:game_id>", methods=["GET"])
def view_game(game_id):
    auth = authentication_service.current_context()
    game = GameService().get_visible_game(game_id, auth)
    return jsonify(game.to_dict(include_builds=True)), 200


@game_bp.route("/games/<int:game_id>", methods=["PUT"])
@login_required
def edit_game(game_id):
    form = GameForm()
    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400
    auth = authentication_service.current_context()
    game = GameService().update_game(game_id, auth, **form.get_game_data())
    return jsonify(game.to_dict(include_builds=True)), 200


@game_bp.route("/games/<int:game_id>/status", methods=["POST"])
@login_required
def change_status(game_id):
    form = GameStatusForm()
    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400
    auth = authentication_service.current_context()
    game = GameService().change_status(game_id, form.status.data, auth)
    return jsonify(game.to_dict()), 200


@game_bp.route("/games/<int:game_id>/builds", methods=["POST"])
@login_required
def attach_builds(game_id):
    auth = authentication_service.current_context()
    tracker = upload_registry.tracker_for(auth)
    builds = tracker.finalize(
        game_id,
        BuildService(),
        strict=not _flag("confirm_incomplete"),
        required_platforms=_required_platforms(),
    )
    return jsonify({"builds": [build.to_dict() for build in builds], "count": len(builds)}), 201


@game_bp.route("/games/<int:game_id>", methods=["DELETE"])
@login_required
def delete_game(game_id):
    auth = authentication_service.current_context()
    removed = GameService().delete_game(game_id, auth)
    return jsonify({"message": "Game deleted", "id": game_id, "removed_files": removed}), 200
