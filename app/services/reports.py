"""Sales reporting for a restaurant: filtered totals, dashboard figures and
PDF/XLSX exports. Periods are interpreted in the restaurant's timezone."""
import io
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import db
from models.order import Order, OrderItem
from models.restaurant import Restaurant
from models.user import UserProfile
from app.services import order_status
from app.utils.timezones import day_bounds, local_today, to_local, to_utc_naive, utcnow, zone

PERIODS = ("all", "year", "month", "day", "hour")
TOP_PRODUCTS = 5
RECENT_ORDERS = 10


class ReportFilterError(Exception):
    pass


@dataclass
class ReportFilter:
    period: str = "all"
    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: Optional[int] = None
    payment_method: Optional[str] = None

    @classmethod
    def from_args(cls, args, restaurant, now=None):
        """Build from query args; missing date parts default to the local today."""
        period = (args.get("filter") or args.get("period") or "all").lower()
        if period not in PERIODS:
            raise ReportFilterError("Invalid period")
        today = local_today(restaurant.timezone, now)

        def _int(name, default):
            raw = args.get(name)
            if raw in (None, ""):
                return default
            try:
                return int(raw)
            except ValueError:
                raise ReportFilterError(f"Invalid {name}")

        hour_raw = args.get("hour")
        hour = None if hour_raw in (None, "", "all") else _int("hour", None)
        if hour is not None and not 0 <= hour <= 23:
            raise ReportFilterError("Invalid hour")
        method = args.get("payment_method")
        return cls(
            period=period,
            year=_int("year", today.year),
            month=_int("month", today.month),
            day=_int("day", today.day),
            hour=hour,
            payment_method=None if method in (None, "", "all") else method,
        )

    def bounds(self, tz_name):
        """UTC [start, end) of the period, or ``(None, None)`` for ``all``."""
        if self.period == "all":
            return None, None
        tz = zone(tz_name)
        try:
            if self.period == "year":
                start = datetime(self.year, 1, 1, tzinfo=tz)
                end = datetime(self.year + 1, 1, 1, tzinfo=tz)
            elif self.period == "month":
                start = datetime(self.year, self.month, 1, tzinfo=tz)
                end = (start + timedelta(days=32)).replace(day=1)
            else:
                start_day = date(self.year, self.month, self.day)
                if self.period == "hour" and self.hour is not None:
                    start = datetime(self.year, self.month, self.day, self.hour, tzinfo=tz)
                    end = start + timedelta(hours=1)
                else:
                    return day_bounds(start_day, tz_name)
        except ValueError:
            raise ReportFilterError("Invalid date")
        return to_utc_naive(start), to_utc_naive(end)

    def label(self):
        if self.period == "all":
            text = "All time"
        elif self.period == "year":
            text = f"{self.year}"
        elif self.period == "month":
            text = f"{self.year}-{self.month:02d}"
        elif self.period == "day" or self.hour is None:
            text = f"{self.year}-{self.month:02d}-{self.day:02d}"
        else:
            text = f"{self.year}-{self.month:02d}-{self.day:02d} {self.hour:02d}:00"
        if self.payment_method:
            text += f" / {self.payment_method}"
        return text


def filter_orders(restaurant, filt: ReportFilter):
    query = Order.query.filter(Order.restaurant_id == restaurant.id)
    start, end = filt.bounds(restaurant.timezone)
    if start is not None:
        query = query.filter(Order.created_at >= start, Order.created_at < end)
    if filt.payment_method:
        query = query.filter(Order.payment_method == filt.payment_method)
    return query.order_by(Order.created_at.desc()).all()


def _orders_frame(orders, tz_name) -> pd.DataFrame:
    rows = [
        {
            "order_number": o.order_number,
            "created_at": to_local(o.created_at, tz_name).strftime("%Y-%m-%d %H:%M"),
            "customer": o.customer_name,
            "table": o.table.name if o.table else "",
            "status": o.order_status,
            "payment_method": o.payment_method or "",
            "total": float(o.total_amount),
        }
        for o in orders
    ]
    columns = ["order_number", "created_at", "customer", "table", "status", "payment_method", "total"]
    return pd.DataFrame(rows, columns=columns)


def _items_frame(orders) -> pd.DataFrame:
    rows = [
        {"name": oi.name, "quantity": oi.quantity, "total": float(oi.subtotal)}
        for o in orders
        if o.order_status != order_status.CANCELLED
        for oi in o.items
    ]
    return pd.DataFrame(rows, columns=["name", "quantity", "total"])


def summarize(orders) -> dict:
    """Revenue and averages ignore cancelled orders; ``count`` includes them."""
    billable = [o for o in orders if o.order_status != order_status.CANCELLED]
    total = sum(float(o.total_amount) for o in billable)
    return {
        "total": round(total, 2),
        "count": len(orders),
        "completed": sum(1 for o in orders if o.order_status == order_status.DELIVERED),
        "pending": sum(1 for o in orders if o.order_status in order_status.PENDING),
        "cancelled": len(orders) - len(billable),
        "average": round(total / len(billable), 2) if billable else 0.0,
    }


def payment_breakdown(orders):
    frame = _orders_frame([o for o in orders if o.order_status != order_status.CANCELLED], "UTC")
    if frame.empty:
        return []
    grouped = (
        frame.groupby("payment_method")["total"].agg(["count", "sum"]).reset_index()
        .sort_values("sum", ascending=False)
    )
    return [
        {"payment_method": row.payment_method, "count": int(row["count"]), "total": round(float(row["sum"]), 2)}
        for _, row in grouped.iterrows()
    ]


def top_products(orders, limit=TOP_PRODUCTS):
    frame = _items_frame(orders)
    if frame.empty:
        return []
    grouped = (
        frame.groupby("name")[["quantity", "total"]].sum().reset_index()
        .sort_values(["quantity", "total"], ascending=False)
        .head(limit)
    )
    return [
        {"name": row["name"], "quantity": int(row["quantity"]), "total": round(float(row["total"]), 2)}
        for _, row in grouped.iterrows()
    ]


def build_report(restaurant, filt: ReportFilter) -> dict:
    orders = filter_orders(restaurant, filt)
    return {
        "restaurant": {"id": restaurant.id, "name": restaurant.name, "currency": restaurant.currency},
        "filter": {**filt.__dict__, "label": filt.label()},
        "summary": summarize(orders),
        "payment_methods": payment_breakdown(orders),
        "top_products": top_products(orders),
        "orders": [o.to_dict() for o in orders],
    }


def _pct_change(current, previous):
    if not previous:
        return 100.0 if current else 0.0
    return round((current - previous) / previous * 100, 1)


def dashboard_stats(restaurant, now=None) -> dict:
    today = local_today(restaurant.timezone, now)
    t_start, t_end = day_bounds(today, restaurant.timezone)
    y_start, y_end = day_bounds(today - timedelta(days=1), restaurant.timezone)

    def _day(start, end):
        return Order.query.filter(
            Order.restaurant_id == restaurant.id,
            Order.created_at >= start,
            Order.created_at < end,
        ).all()

    today_orders = _day(t_start, t_end)
    yesterday_orders = _day(y_start, y_end)
    today_summary = summarize(today_orders)
    yesterday_summary = summarize(yesterday_orders)
    pending = Order.query.filter(
        Order.restaurant_id == restaurant.id,
        Order.order_status.in_(order_status.PENDING),
    ).count()
    recent = (
        Order.query.filter_by(restaurant_id=restaurant.id)
        .order_by(Order.created_at.desc())
        .limit(RECENT_ORDERS)
        .all()
    )
    return {
        "currency": restaurant.currency,
        "today_sales": today_summary["total"],
        "yesterday_sales": yesterday_summary["total"],
        "sales_change": _pct_change(today_summary["total"], yesterday_summary["total"]),
        "today_orders": today_summary["count"],
        "yesterday_orders": yesterday_summary["count"],
        "orders_change": _pct_change(today_summary["count"], yesterday_summary["count"]),
        "average_ticket": today_summary["average"],
        "pending_orders": pending,
        "top_products": top_products(today_orders),
        "recent_orders": [o.to_dict(with_items=False) for o in recent],
    }


def platform_statistics(now=None) -> dict:
    """Totals, change against one month ago, and a 7-day growth series."""
    now = now or utcnow()
    month_ago = (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()

    def _counts(model, until=None):
        query = db.session.query(model)
        if until is not None:
            query = query.filter(model.created_at < until)
        return query.count()

    totals = {
        "users": _counts(UserProfile),
        "restaurants": _counts(Restaurant),
        "orders": _counts(Order),
    }
    previous = {
        "users": _counts(UserProfile, month_ago),
        "restaurants": _counts(Restaurant, month_ago),
        "orders": _counts(Order, month_ago),
    }
    growth = []
    for offset in range(6, -1, -1):
        day = (now - timedelta(days=offset)).date()
        start = datetime.combine(day, datetime.min.time())
        end = start + timedelta(days=1)
        growth.append({
            "date": day.isoformat(),
            "users": UserProfile.query.filter(UserProfile.created_at >= start, UserProfile.created_at < end).count(),
            "restaurants": Restaurant.query.filter(Restaurant.created_at >= start, Restaurant.created_at < end).count(),
            "orders": Order.query.filter(Order.created_at >= start, Order.created_at < end).count(),
        })
    return {
        "totals": totals,
        "changes": {key: _pct_change(totals[key], previous[key]) for key in totals},
        "growth": growth,
    }


def _report_frames(report, tz_name):
    summary = report["summary"]
    summary_frame = pd.DataFrame(
        [
            ("Period", report["filter"]["label"]),
            ("Currency", report["restaurant"]["currency"]),
            ("Revenue", summary["total"]),
            ("Orders", summary["count"]),
            ("Completed", summary["completed"]),
            ("Pending", summary["pending"]),
            ("Cancelled", summary["cancelled"]),
            ("Average ticket", summary["average"]),
        ],
        columns=["Metric", "Value"],
    )
    orders_frame = pd.DataFrame(
        [
            {
                "Order": o["order_number"],
                "Date": to_local(datetime.fromisoformat(o["created_at"]), tz_name).strftime("%Y-%m-%d %H:%M"),
                "Customer": o["customer_name"],
                "Table": o["table_name"] or "",
                "Status": order_status.STATUS_LABELS.get(o["order_status"], o["order_status"]),
                "Payment": o["payment_method"] or "",
                "Total": o["total_amount"],
            }
            for o in report["orders"]
        ],
        columns=["Order", "Date", "Customer", "Table", "Status", "Payment", "Total"],
    )
    payments_frame = pd.DataFrame(report["payment_methods"], columns=["payment_method", "count", "total"])
    payments_frame.columns = ["Payment method", "Orders", "Total"]
    products_frame = pd.DataFrame(report["top_products"], columns=["name", "quantity", "total"])
    products_frame.columns = ["Product", "Quantity", "Total"]
    return [
        ("Summary", summary_frame),
        ("Orders", orders_frame),
        ("Payment methods", payments_frame),
        ("Top products", products_frame),
    ]


def export_xlsx(report, tz_name) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet, frame in _report_frames(report, tz_name):
            frame.to_excel(writer, sheet_name=sheet, index=False)
    return buffer.getvalue()


def export_pdf(report, tz_name) -> bytes:
    """One section per sheet of the XLSX export, each on its own page."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=18,
        spaceAfter=20,
        alignment=1,
    )
    story = [
        Paragraph(f"{report['restaurant']['name']} - Sales Report", title_style),
        Paragraph(f"Period: {report['filter']['label']}", styles["Heading2"]),
        Spacer(1, 12),
    ]
    frames = _report_frames(report, tz_name)
    for idx, (section, frame) in enumerate(frames):
        if idx:
            story.append(PageBreak())
        story.append(Paragraph(section, styles["Heading2"]))
        story.append(Spacer(1, 8))
        if frame.empty:
            story.append(Paragraph("No data for this period.", styles["Normal"]))
            continue
        rows = [list(frame.columns)] + [[str(v) for v in row] for row in frame.itertuples(index=False)]
        table = Table(rows, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ("BACKGROUND", (0, 1), (-1, -1), colors.beige),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
        ]))
        story.append(table)
    doc.build(story)
    return buffer.getvalue()
