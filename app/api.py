from app.routes import (
    auth_bp,
    restaurants_bp,
    public_bp,
    admin_bp,
    storage_bp,
)


def register_api_v1(app):
    """Register blueprint routes under the API version prefix."""
    app.register_blueprint(auth_bp)
    app.register_blueprint(restaurants_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(admin_bp)
    # uploaded files are served outside the versioned prefix
    app.register_blueprint(storage_bp)
