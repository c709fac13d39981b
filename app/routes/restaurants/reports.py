from flask import request, Response
from app.services import reports
from app.services.reports import ReportFilter, ReportFilterError
from app.utils import error, ok, restaurant_access
from app.utils.slug import slugify
from . import restaurants_bp

EXPORT_FORMATS = {
    "pdf": "application/pdf",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def _report():
    restaurant = request.restaurant
    filt = ReportFilter.from_args(request.args, restaurant)
    return reports.build_report(restaurant, filt)


@restaurants_bp.route("/<int:restaurant_id>/reports", methods=["GET"])
@restaurant_access("reports")
def sales_report(restaurant_id):
    """
    Sales report for a period
    ---
    tags:
      - Restaurants
    parameters:
      - name: filter
        in: query
        type: string
        enum: [all, year, month, day, hour]
      - name: year
        in: query
        type: integer
      - name: month
        in: query
        type: integer
      - name: day
        in: query
        type: integer
      - name: hour
        in: query
        type: string
      - name: payment_method
        in: query
        type: string
    responses:
      200:
        description: Summary, payment breakdown, top products and orders
      400:
        description: Invalid filter
    """
    try:
        report = _report()
    except ReportFilterError as e:
        return error(str(e), status=400)
    return ok({"report": report})


@restaurants_bp.route("/<int:restaurant_id>/reports/export", methods=["GET"])
@restaurant_access("reports")
def export_report(restaurant_id):
    fmt = (request.args.get("format") or "pdf").lower()
    if fmt not in EXPORT_FORMATS:
        return error("Unsupported export format", status=400)
    try:
        report = _report()
    except ReportFilterError as e:
        return error(str(e), status=400)
    tz_name = request.restaurant.timezone
    body = reports.export_pdf(report, tz_name) if fmt == "pdf" else reports.export_xlsx(report, tz_name)
    filename = f"report-{slugify(request.restaurant.name) or restaurant_id}-{slugify(report['filter']['label']) or 'all'}.{fmt}"
    return Response(
        body,
        mimetype=EXPORT_FORMATS[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
