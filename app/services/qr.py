import io
from urllib.parse import urlencode

import qrcode
from flask import current_app


def table_menu_url(restaurant, table):
    base = current_app.config.get("PUBLIC_BASE_URL", "").rstrip("/")
    return f"{base}/menu/{restaurant.slug}?{urlencode({'table': table.qr_code_token})}"


def qr_png(link) -> bytes:
    img = qrcode.make(link)
    buffer = io.BytesIO()
    img.save(buffer)
    return buffer.getvalue()
