import os

from flask import jsonify, redirect, request, send_from_directory
from flask_login import login_required

from app.modules.auth.services import authentication_service
from app.modules.build import build_bp
from app.modules.build.services import BuildService
from app.modules.game.services import GameService
from core.configuration.configuration import storage_download_route
from core.storage import storage_service


@build_bp.route(f"/{storage_download_route()}", methods=["GET"])
@login_required
def download_build():
    file_id = request.args.get("id", "").strip()
    build = BuildService().get_by_file_id(file_id) if file_id else None
    if build is None:
        return jsonify({"message": "Build not found"}), 404

    auth = authentication_service.current_context()
    game_service = GameService()
    game = game_service.get_visible_game(build.game_id, auth)
    if not game_service.library_service.can_download(auth.user_id, game):
        return jsonify({"message": "Purchase this game to download it", "price": game.price}), 402

    if storage_service.uses_s3():
        url = storage_service.generate_presigned_url(build.storage_key)
        game_service.register_download(game, auth)
        return redirect(url)

    abs_file_path = os.path.abspath(storage_service.get_local_path(build.storage_key))
    if not os.path.exists(abs_file_path):
        return jsonify({"message": "File not found in storage", "file_id": file_id}), 404

    game_service.register_download(game, auth)
    return send_from_directory(
        directory=os.path.dirname(abs_file_path),
        path=build.file_name,
        as_attachment=True,
    )


@build_bp.route("/games/<int:game_id>/builds", methods=["GET"])
def list_builds(game_id):
    auth = authentication_service.current_context()
    game = GameService().get_visible_game(game_id, auth)
    return jsonify({"builds": [build.to_dict() for build in game.builds]}), 200
