from datetime import datetime
from models import db, BIGINT

PLATFORM_DEFAULTS = {
    "platform_name": "PratoDigital",
    "support_email": "suporte@pratodigital.com",
    "enable_registration": True,
    "require_email_verification": False,
    "maintenance_mode": False,
}


class PlatformSettings(db.Model):
    """Singleton row holding platform-wide switches."""

    __tablename__ = "platform_settings"

    id = db.Column(BIGINT, primary_key=True)
    platform_name = db.Column(db.String(100), default=PLATFORM_DEFAULTS["platform_name"])
    support_email = db.Column(db.String(255), default=PLATFORM_DEFAULTS["support_email"])
    enable_registration = db.Column(db.Boolean, default=True)
    require_email_verification = db.Column(db.Boolean, default=False)
    maintenance_mode = db.Column(db.Boolean, default=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id.asc()).first()

    def to_dict(self):
        return {key: getattr(self, key) for key in PLATFORM_DEFAULTS}
