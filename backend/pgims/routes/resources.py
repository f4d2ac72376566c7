# Overview: Uniform CRUD routes for the boilerplate resources, one rule set per ResourceSpec.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..services import resource_service
from ..services.resource_service import RESOURCES


resources_bp = Blueprint("resources", __name__, url_prefix="/api")


def _register(slug: str, resource) -> None:
    endpoint = slug.replace("-", "_")

    @require_auth
    @require_permission(resource.reader)
    def list_view():
        items = resource_service.list_items(resource, request.args.to_dict())
        return jsonify([obj.to_dict() for obj in items]), 200

    @require_auth
    @require_permission(resource.write_permission)
    def create_view():
        obj = resource_service.create_item(resource, request.get_json(silent=True))
        return jsonify(obj.to_dict()), 201

    @require_auth
    @require_permission(resource.reader)
    def get_view(item_id: int):
        return jsonify(resource_service.get_item(resource, item_id).to_dict()), 200

    @require_auth
    @require_permission(resource.write_permission)
    def update_view(item_id: int):
        payload = request.get_json(silent=True)
        if resource is resource_service.USERS:
            obj = resource_service.update_user(item_id, payload)
        else:
            obj = resource_service.update_item(resource, item_id, payload)
        return jsonify(obj.to_dict()), 200

    @require_auth
    @require_permission(resource.write_permission)
    def delete_view(item_id: int):
        resource_service.delete_item(resource, item_id)
        return jsonify({"ok": True}), 200

    resources_bp.add_url_rule(f"/{slug}", f"list_{endpoint}", list_view, methods=["GET"])
    resources_bp.add_url_rule(f"/{slug}", f"create_{endpoint}", create_view, methods=["POST"])
    resources_bp.add_url_rule(f"/{slug}/<int:item_id>", f"get_{endpoint}", get_view, methods=["GET"])
    resources_bp.add_url_rule(f"/{slug}/<int:item_id>", f"update_{endpoint}", update_view, methods=["PUT", "PATCH"])
    resources_bp.add_url_rule(f"/{slug}/<int:item_id>", f"delete_{endpoint}", delete_view, methods=["DELETE"])


for _slug, _resource in RESOURCES.items():
    _register(_slug, _resource)
