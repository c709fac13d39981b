import os
import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade, stamp as alembic_stamp, migrate as alembic_migrate

from app.services import restaurant_service
from app.services.restaurant_service import PURGE_RANGES
from app.utils.db import transactional
from models import db
from models.platform import PLATFORM_DEFAULTS, PlatformSettings
from models.restaurant import Restaurant
from models.user import UserProfile, UserRole


def _assert_safe_for_upgrade():
    # production schema changes need ALLOW_DB_MIGRATIONS=true
    env = (current_app.config.get("ENV") or "").lower()
    app_env = (os.getenv("APP_ENV") or "").lower()
    if "production" in (app_env, env):
        if (os.getenv("ALLOW_DB_MIGRATIONS") or "").lower() not in ("1", "true", "yes"):
            raise click.ClickException("Refusing to run DB migration in production without ALLOW_DB_MIGRATIONS=true")


@click.command("db-migrate-safe")
@click.option("-m", "--message", default="auto migration", help="Migration message")
@with_appcontext
def db_migrate_safe(message):
    """Generate a migration script from the current models."""
    alembic_migrate(message=message)
    click.echo("Migration script generated.")


@click.command("db-upgrade-safe")
@with_appcontext
def db_upgrade_safe():
    """Apply pending migrations."""
    _assert_safe_for_upgrade()
    alembic_upgrade()
    click.echo("Database upgraded.")


@click.command("db-stamp-safe")
@click.option("--revision", default="head", help="Revision to stamp, default 'head'")
@with_appcontext
def db_stamp_safe(revision):
    _assert_safe_for_upgrade()
    alembic_stamp(revision)
    click.echo(f"Database stamped at {revision}.")


@click.command("create-super-admin")
@click.option("--email", required=True)
@click.option("--name", default="Administrator")
@click.password_option()
@with_appcontext
def create_super_admin(email, name, password):
    """Create a platform administrator, or promote an existing account."""
    email = email.strip().lower()
    user = UserProfile.query.filter(db.func.lower(UserProfile.email) == email).first()
    if user is None:
        user = UserProfile(email=email, name=name)
        user.set_password(password)
        db.session.add(user)
    if user.role_row:
        user.role_row.role = "super_admin"
    else:
        user.role_row = UserRole(role="super_admin")
    db.session.commit()
    click.echo(f"{email} is now a super admin.")


@click.command("seed-platform-settings")
@with_appcontext
def seed_platform_settings():
    """Insert the platform settings row with defaults if it is missing."""
    if PlatformSettings.current() is not None:
        click.echo("Platform settings already present.")
        return
    db.session.add(PlatformSettings(**PLATFORM_DEFAULTS))
    db.session.commit()
    click.echo("Platform settings created.")


@click.command("purge-orders")
@click.argument("slug")
@click.option("--older-than", type=click.Choice(sorted(PURGE_RANGES)), default="1year", show_default=True)
@with_appcontext
def purge_orders(slug, older_than):
    """Delete a restaurant's orders older than a range, e.g. for data retention jobs."""
    restaurant = Restaurant.query.filter_by(slug=slug).first()
    if restaurant is None:
        raise click.ClickException(f"No restaurant with slug {slug!r}")
    with transactional("Failed to purge orders"):
        deleted = restaurant_service.purge_orders(restaurant, older_than)
    click.echo(f"{deleted} orders deleted from {slug}.")


def register_cli(app):
    app.cli.add_command(db_migrate_safe)
    app.cli.add_command(db_upgrade_safe)
    app.cli.add_command(db_stamp_safe)
    app.cli.add_command(create_super_admin)
    app.cli.add_command(seed_platform_settings)
    app.cli.add_command(purge_orders)
