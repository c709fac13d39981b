from flask import request
from app.schemas.team import TeamMemberRequest, TeamPermissionsRequest
from app.services import team
from app.services.team import TeamError
from app.tasks.notifications import dispatch, send_welcome_email_task
from app.utils import error, internal_error_response, ok, restaurant_access, transactional, validate_schema
from . import restaurants_bp


@restaurants_bp.route("/<int:restaurant_id>/team", methods=["GET"])
@restaurant_access(owner_only=True)
def list_team(restaurant_id):
    return ok({"members": team.list_members(request.restaurant)})


@restaurants_bp.route("/<int:restaurant_id>/team", methods=["POST"])
@restaurant_access(owner_only=True)
@validate_schema(TeamMemberRequest)
def add_team_member(restaurant_id):
    """
    Create an account for a team member and grant module access
    ---
    tags:
      - Restaurants
    responses:
      201:
        description: Member created
      400:
        description: Email already registered
      403:
        description: Caller is not the owner
    """
    data: TeamMemberRequest = request.validated_data
    restaurant = request.restaurant
    try:
        with transactional("Failed to add team member"):
            row = team.add_member(restaurant, data)
    except TeamError as e:
        return error(str(e), status=400)
    except Exception:
        return internal_error_response()
    dispatch(send_welcome_email_task, row.user.email, row.user.name, restaurant.name)
    member = next(m for m in team.list_members(restaurant) if m["id"] == row.id)
    return ok({"member": member}, message="Team member added", status=201)


@restaurants_bp.route("/<int:restaurant_id>/team/<int:member_id>", methods=["PUT"])
@restaurant_access(owner_only=True)
@validate_schema(TeamPermissionsRequest)
def update_team_member(restaurant_id, member_id):
    try:
        with transactional("Failed to update permissions"):
            row = team.update_permissions(request.restaurant, member_id, request.validated_data.permissions)
    except TeamError as e:
        return error(str(e), status=404)
    except Exception:
        return internal_error_response()
    return ok({"permissions": row.flags()}, message="Permissions updated")


@restaurants_bp.route("/<int:restaurant_id>/team/<int:member_id>", methods=["DELETE"])
@restaurant_access(owner_only=True)
def remove_team_member(restaurant_id, member_id):
    try:
        with transactional("Failed to remove team member"):
            team.remove_member(request.restaurant, member_id)
    except TeamError as e:
        return error(str(e), status=404)
    except Exception:
        return internal_error_response()
    return ok(message="Team member removed")
