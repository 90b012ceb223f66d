from __future__ import annotations

from flask import Flask, g

from ..common.http import json_body, ok
from ..common.validators import validate
from ..container import Container
from .guard import build_token_required
from .service import profile_dict
from .validation import CHANGE_PASSWORD_RULES, LOGIN_RULES, PROFILE_UPDATE_RULES, REGISTER_RULES


def register(app: Flask, container: Container) -> None:
    token_required = build_token_required(container)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = validate(json_body(), REGISTER_RULES)
        account = container.auth_service.register(
            name=data["name"],
            email=data["email"],
            password=data["password"],
        )
        token = container.auth_service.issue_token(account)
        return ok("User registered successfully", {"user": profile_dict(account), "token": token}, 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = validate(json_body(), LOGIN_RULES)
        result = container.auth_service.authenticate(data["email"], data["password"])
        return ok("Login successful", {"user": profile_dict(result.account), "token": result.token})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @token_required
    def auth_logout():
        account = container.auth_service.end_session(g.account.account_id)
        return ok("Logout successful", {"user": profile_dict(account)})

    @app.route("/api/auth/profile", methods=["GET"], endpoint="auth_profile")
    @token_required
    def auth_profile():
        return ok("Profile retrieved successfully", {"user": profile_dict(g.account)})

    @app.route("/api/auth/profile", methods=["PUT"], endpoint="auth_update_profile")
    @token_required
    def auth_update_profile():
        data = validate(json_body(), PROFILE_UPDATE_RULES)
        account = container.account_service.update_profile(
            g.account.account_id,
            name=data.get("name"),
            email=data.get("email"),
            avatar=data.get("avatar"),
        )
        return ok("Profile updated successfully", {"user": profile_dict(account)})

    @app.route("/api/auth/change-password", methods=["PUT"], endpoint="auth_change_password")
    @token_required
    def auth_change_password():
        data = validate(json_body(), CHANGE_PASSWORD_RULES)
        container.auth_service.change_password(
            g.account.account_id,
            current_password=data["currentPassword"],
            new_password=data["newPassword"],
        )
        return ok("Password changed successfully")

    @app.route("/api/auth/users", methods=["GET"], endpoint="auth_users")
    @token_required
    def auth_users():
        users = [profile_dict(a) for a in container.account_service.list_accounts()]
        return ok("Users retrieved successfully", {"users": users, "count": len(users)})
