# --- models/user.py ---
from datetime import datetime
from passlib.hash import argon2
from models import db, BIGINT, isoformat

ROLES = ("super_admin", "restaurant_admin", "staff")


class UserProfile(db.Model):
    __tablename__ = "user_profile"

    id = db.Column(BIGINT, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=True)
    phone = db.Column(db.String(20), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    role_row = db.relationship("UserRole", backref="user", uselist=False, cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = argon2.hash(password)

    def check_password(self, password):
        try:
            return argon2.verify(password, self.password_hash)
        except (ValueError, TypeError):
            return False

    @property
    def role(self):
        return self.role_row.role if self.role_row else None

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"


class UserRole(db.Model):
    __tablename__ = "user_role"

    id = db.Column(BIGINT, primary_key=True)
    user_id = db.Column(BIGINT, db.ForeignKey("user_profile.id"), unique=True, nullable=False)
    role = db.Column(db.String(30), nullable=False, default="restaurant_admin")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class PasswordResetToken(db.Model):
    __tablename__ = "password_reset_token"

    id = db.Column(BIGINT, primary_key=True)
    user_id = db.Column(BIGINT, db.ForeignKey("user_profile.id"), nullable=False)
    token = db.Column(db.String(128), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    used = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f"<PasswordResetToken user={self.user_id} used={self.used}>"
