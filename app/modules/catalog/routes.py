from flask import jsonify, request

from app.modules.auth.services import authentication_service
from app.modules.catalog import catalog_bp
from app.modules.catalog.exceptions import InvalidFilterSpec
from app.modules.catalog.filters import FilterSpec
from app.modules.catalog.services import CatalogService


@catalog_bp.route("/catalog", methods=["GET", "POST"])
def catalog():
    if request.method == "POST":
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise InvalidFilterSpec("Catalog filters must be a JSON object")
    else:
        data = request.args
    spec = FilterSpec.from_mapping(data)
    page = CatalogService(authentication_service.current_context()).fetch_catalog_page(spec)
    return jsonify(page.to_dict()), 200
