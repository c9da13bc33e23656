from flask import jsonify, request
from flask_login import current_user, login_required

from app.modules.auth.services import authentication_service
from app.modules.build.models import DEFAULT_BUILD_VERSION
from app.modules.upload import upload_bp
from app.modules.upload.services import spool_upload, upload_registry
from app.modules.upload.units import UploadState


def _current_tracker():
    return upload_registry.tracker_for(authentication_service.current_context())


@upload_bp.route("/uploads", methods=["POST"])
@login_required
def start_upload():
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"message": "No file provided"}), 400

    tracker = _current_tracker()
    source = spool_upload(file, current_user.temp_folder())
    unit_id = tracker.start_upload(
        source,
        request.form.get("platform", ""),
        request.form.get("version") or DEFAULT_BUILD_VERSION,
    )
    unit = tracker.get_unit(unit_id)
    return jsonify(unit.to_dict() if unit else {"id": unit_id}), 202


@upload_bp.route("/uploads", methods=["GET"])
@login_required
def list_uploads():
    tracker = _current_tracker()
    units = tracker.units()
    warning = tracker.finalize_warning()
    return (
        jsonify(
            {
                "items": [unit.to_dict() for unit in units],
                "completed": len([unit for unit in units if unit.state == UploadState.COMPLETED]),
                "warning": warning.to_dict() if warning else None,
            }
        ),
        200,
    )


@upload_bp.route("/uploads/<unit_id>", methods=["GET"])
@login_required
def get_upload(unit_id):
    unit = _current_tracker().get_unit(unit_id)
    if unit is None:
        return jsonify({"message": "Upload not found"}), 404
    return jsonify(unit.to_dict()), 200


@upload_bp.route("/uploads/<unit_id>", methods=["DELETE"])
@login_required
def remove_upload(unit_id):
    if not _current_tracker().remove_upload(unit_id):
        return jsonify({"message": "Upload not found"}), 404
    return jsonify({"message": "Upload removed", "id": unit_id}), 200
