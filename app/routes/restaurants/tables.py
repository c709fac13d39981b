from flask import request, Response
from app.schemas.restaurant import TableRequest
from app.services import qr
from app.utils import error, internal_error_response, ok, restaurant_access, transactional, validate_schema
from models import db
from models.restaurant import Table
from . import restaurants_bp


def _table_or_none(restaurant, table_id):
    table = db.session.get(Table, table_id)
    if not table or table.restaurant_id != restaurant.id:
        return None
    return table


def _table_dict(restaurant, table):
    data = table.to_dict()
    data["menu_url"] = qr.table_menu_url(restaurant, table)
    return data


@restaurants_bp.route("/<int:restaurant_id>/tables", methods=["GET"])
@restaurant_access("qr_codes")
def list_tables(restaurant_id):
    tables = Table.query.filter_by(restaurant_id=restaurant_id).order_by(Table.name.asc()).all()
    return ok({"tables": [_table_dict(request.restaurant, t) for t in tables]})


@restaurants_bp.route("/<int:restaurant_id>/tables", methods=["POST"])
@restaurant_access("qr_codes")
@validate_schema(TableRequest)
def add_table(restaurant_id):
    data: TableRequest = request.validated_data
    table = Table(restaurant_id=restaurant_id, name=data.name, is_active=data.is_active)
    try:
        with transactional("Failed to add table"):
            db.session.add(table)
    except Exception:
        return internal_error_response()
    return ok({"table": _table_dict(request.restaurant, table)}, message="Table added", status=201)


@restaurants_bp.route("/<int:restaurant_id>/tables/<int:table_id>", methods=["PUT"])
@restaurant_access("qr_codes")
@validate_schema(TableRequest)
def update_table(restaurant_id, table_id):
    table = _table_or_none(request.restaurant, table_id)
    if not table:
        return error("Table not found", status=404)
    data: TableRequest = request.validated_data
    table.name = data.name
    table.is_active = data.is_active
    try:
        with transactional("Failed to update table"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"table": _table_dict(request.restaurant, table)}, message="Table updated")


@restaurants_bp.route("/<int:restaurant_id>/tables/<int:table_id>", methods=["DELETE"])
@restaurant_access("qr_codes")
def delete_table(restaurant_id, table_id):
    table = _table_or_none(request.restaurant, table_id)
    if not table:
        return error("Table not found", status=404)
    try:
        with transactional("Failed to delete table"):
            db.session.delete(table)
    except Exception:
        return internal_error_response()
    return ok(message="Table deleted")


@restaurants_bp.route("/<int:restaurant_id>/tables/<int:table_id>/regenerate", methods=["POST"])
@restaurant_access("qr_codes")
def regenerate_table_token(restaurant_id, table_id):
    """Issue a new QR token; printed codes with the old token stop working."""
    table = _table_or_none(request.restaurant, table_id)
    if not table:
        return error("Table not found", status=404)
    table.regenerate_token()
    try:
        with transactional("Failed to regenerate table token"):
            pass
    except Exception:
        return internal_error_response()
    return ok({"table": _table_dict(request.restaurant, table)}, message="QR code regenerated")


@restaurants_bp.route("/<int:restaurant_id>/tables/<int:table_id>/qr.png", methods=["GET"])
@restaurant_access("qr_codes")
def table_qr_code(restaurant_id, table_id):
    table = _table_or_none(request.restaurant, table_id)
    if not table:
        return error("Table not found", status=404)
    png = qr.qr_png(qr.table_menu_url(request.restaurant, table))
    return Response(
        png,
        mimetype="image/png",
        headers={"Content-Disposition": f'inline; filename="table-{table.id}.png"'},
    )
