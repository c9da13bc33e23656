import logging

from flask import jsonify

from app.modules.catalog.filters import FilterSpec
from app.modules.catalog.services import fetch_catalog_page
from app.modules.game.services import GameService
from app.modules.public import public_bp

logger = logging.getLogger(__name__)


@public_bp.route("/")
def index():
    logger.info("Access index")
    stats = GameService().stats()
    latest = fetch_catalog_page(FilterSpec(page_size=6))
    return jsonify({"stats": stats, "latest": [game.to_dict() for game in latest.records]}), 200
