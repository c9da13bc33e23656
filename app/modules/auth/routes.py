import logging

from flask import jsonify
from flask_login import current_user, login_required, logout_user
from flask_wtf.csrf import generate_csrf

from app.modules.auth import auth_bp
from app.modules.auth.forms import LoginForm, SignupForm
from app.modules.auth.services import authentication_service

logger = logging.getLogger(__name__)


@auth_bp.route("/signup", methods=["POST"])
def signup():
    form = SignupForm()
    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400

    email = form.email.data
    if not authentication_service.is_email_available(email):
        return jsonify({"message": f"Email {email} in use"}), 409

    user = authentication_service.create_with_profile(
        email=email,
        password=form.password.data,
        display_name=form.display_name.data,
        user_type=form.user_type.data,
    )
    authentication_service.login(email, form.password.data)
    logger.info("New account %s", user.id)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return jsonify(current_user.to_dict()), 200

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"errors": form.errors}), 400

    user = authentication_service.login(form.email.data, form.password.data, remember=form.remember_me.data)
    if user is None:
        return jsonify({"message": "Invalid credentials"}), 401
    return jsonify(user.to_dict()), 200


@auth_bp.route("/logout", methods=["GET", "POST"])
def logout():
    logout_user()
    return jsonify({"message": "Logged out"}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.to_dict()), 200


@auth_bp.route("/csrf-token", methods=["GET"])
def csrf_token():
    return jsonify({"csrf_token": generate_csrf()}), 200
