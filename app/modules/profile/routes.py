from flask import jsonify
from flask_login import current_user, login_required

from app.modules.profile import profile_bp
from app.modules.profile.forms import UserProfileForm
from app.modules.profile.services import UserProfileService


@profile_bp.route("/profile", methods=["GET"])
@login_required
def view_profile():
    profile = UserProfileService().get_by_user_id(current_user.id)
    if profile is None:
        return jsonify({"message": "Profile not found"}), 404
    return jsonify(profile.to_dict()), 200


@profile_bp.route("/profile", methods=["PUT", "POST"])
@login_required
def edit_profile():
    service = UserProfileService()
    profile = service.get_by_user_id(current_user.id)
    if profile is None:
        profile = service.create(user_id=current_user.id, display_name=current_user.display_name)

    form = UserProfileForm()
    result, errors = service.update_profile(profile.id, form)
    if errors:
        return jsonify({"errors": errors}), 400
    return jsonify(result.to_dict()), 200
