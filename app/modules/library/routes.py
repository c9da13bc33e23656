from flask import jsonify
from flask_login import current_user, login_required

from app.modules.library import library_bp
from app.modules.library.services import LibraryService


@library_bp.route("/library", methods=["GET"])
@login_required
def my_library():
    entries = LibraryService().get_library(current_user.id)
    return jsonify({"items": [entry.to_dict() for entry in entries], "count": len(entries)}), 200
