# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/fabricstore/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables, the default admin and sample catalogs.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
# - python -m flask users create --name "Jane Doe" --email jane@fabric.local --password "Secret123" --role storekeeper
#
# Permission inspection:
# - python -m flask perms list [--role storekeeper]
# - python -m flask perms check viewer rolls:update
#
# Maintenance:
# - python -m flask maintenance prune-audit --retention-days 365
#   Delete audit entries older than the retention window.

import click
from flask import current_app
from flask.cli import with_appcontext

from .enums import UserRole, values
from .errors import AppError
from .extensions import db
from .models import Catalog, User
from .permissions import (
    PERMISSION_DEFINITIONS,
    ROLE_DESCRIPTIONS,
    ROLE_LABELS,
    get_role_permissions,
    has_permission,
    validate_permission_code,
)
from .services import get_services

DEFAULT_ADMIN = {
    "name": "System Administrator",
    "email": "admin@fabric.local",
    "password": "Admin123",
    "role": UserRole.ADMIN.value,
}

SAMPLE_CATALOGS = [
    {
        "code": "CTN-001",
        "name": "Premium Cotton",
        "material": "Cotton",
        "description": "High-quality cotton fabric",
    },
    {
        "code": "PLY-001",
        "name": "Polyester Blend",
        "material": "Polyester",
        "description": "Durable polyester blend",
    },
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the database with the default admin and sample catalogs.

    Idempotent: existing records are left untouched.
    """
    services = get_services()
    click.echo("START Initializing fabric store...")
    db.create_all()

    admin = db.session.query(User).filter_by(email=DEFAULT_ADMIN["email"]).first()
    if admin:
        click.echo(f"WARN  User '{admin.email}' already exists, skipping...")
    else:
        admin = services.users.create(DEFAULT_ADMIN, None)
        click.echo(f"PASS Created user: {admin.email} with role '{admin.role}'")

    for sample in SAMPLE_CATALOGS:
        if db.session.query(Catalog).filter_by(code=sample["code"]).first():
            click.echo(f"WARN  Catalog '{sample['code']}' already exists, skipping...")
            continue
        catalog = services.catalogs.create(sample, admin.id)
        click.echo(f"PASS Created catalog: {catalog.code} ({catalog.name})")

    click.echo("\n" + "=" * 60)
    click.echo("DONE Fabric store initialized")
    click.echo("=" * 60)
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    click.echo(f"   admin -> {DEFAULT_ADMIN['email']} / {DEFAULT_ADMIN['password']}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm dropping every table')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    current_app.logger.warning("Database reset via CLI")
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all non-deleted users."""
    users = get_services().users.get_all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 100)
    click.echo(f"{'ID':<38} {'Name':<22} {'Email':<26} {'Role':<12} {'Status'}")
    click.echo("=" * 100)
    for user in users:
        click.echo(f"{user.id:<38} {user.name:<22} {user.email:<26} {user.role:<12} {user.status}")
    click.echo("=" * 100 + "\n")


@users_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(values(UserRole)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a user account."""
    try:
        user = get_services().users.create(
            {"name": name, "email": email, "password": password, "role": role},
            None,
        )
    except AppError as e:
        click.echo(f"FAIL Failed to create user: {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Created user: {user.email} with role '{user.role}'")
    click.echo("SECURITY Password securely hashed with bcrypt")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(values(UserRole)), help='Filter by role name')
def list_permissions_cli(role):
    """List all permissions, or those granted to one role."""
    codes = set(get_role_permissions(role)) if role else None
    if role:
        click.echo(f"\nPermissions for role: {ROLE_LABELS[role].upper()}")
        click.echo(f"{ROLE_DESCRIPTIONS[role]}\n")
    click.echo(f"{'Code':<20} {'Name':<22} {'Category'}")
    click.echo("-" * 60)
    for code, label, category in PERMISSION_DEFINITIONS:
        if codes is None or code in codes:
            click.echo(f"{code:<20} {label:<22} {category}")


@perms_group.command('check')
@click.argument('role')
@click.argument('permission')
def check_permission_cli(role, permission):
    """Check whether a role holds a permission."""
    if role not in values(UserRole):
        click.echo(f"FAIL Role '{role}' not found")
        raise SystemExit(1)
    if not validate_permission_code(permission):
        click.echo(f"WARN  Unknown permission code '{permission}'")
    if has_permission(role, permission):
        click.echo(f"PASS {role} has {permission}")
    else:
        click.echo(f"FAIL {role} does not have {permission}")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('prune-audit')
@click.option('--retention-days', type=int, default=None, help='Defaults to AUDIT_RETENTION_DAYS')
@with_appcontext
def prune_audit_cli(retention_days):
    """Delete audit entries older than the retention window."""
    days = retention_days if retention_days is not None else current_app.config["AUDIT_RETENTION_DAYS"]
    try:
        deleted = get_services().audit.prune_older_than(days)
    except AppError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"Deleted {deleted} audit entries older than {days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(maintenance_group)
