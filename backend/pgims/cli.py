# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/pgims/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates the main store and one user per role.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Users:
# - python -m flask users list
#   List all users with roles and active status.
# - python -m flask users create --name Admin --email admin@pgims.local --password "Password123!" --role admin
#   Create a user (prompts if options are omitted).
#
# Permissions:
# - python -m flask perms list [--role cashier]
#   Print the operation -> roles table.

import click
from flask.cli import with_appcontext

from .errors import PosError
from .extensions import db
from .models import Store, User
from .permissions import OPERATION_ROLES, Role, permissions_for_role
from .services.auth_service import create_user

DEFAULT_PASSWORD = "Password123!"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the system: tables, a main store and default users.

    Creates:
    - Store "Main Store" (code MAIN)
    - Users admin@pgims.local, manager@pgims.local, cashier@pgims.local,
      finance@pgims.local
    - All passwords default to: "Password123!"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing PGIMS...")
    db.create_all()

    store = db.session.query(Store).filter_by(code="MAIN").first()
    if not store:
        store = Store(name="Main Store", code="MAIN")
        db.session.add(store)
        db.session.commit()
        click.echo(f"PASS Created store: {store.name} (ID: {store.id})")
    else:
        click.echo(f"PASS Using existing store: {store.name} (ID: {store.id})")

    for role in (Role.ADMIN, Role.MANAGER, Role.CASHIER, Role.FINANCE):
        email = f"{role.value}@pgims.local"
        if db.session.query(User).filter_by(email=email).first():
            click.echo(f"PASS User exists: {email}")
            continue
        create_user(name=role.value.capitalize(), email=email, password=DEFAULT_PASSWORD, role=role.value)
        click.echo(f"PASS Created user: {email} ({role.value})")

    click.echo("DONE System initialized.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("DONE Database reset.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users found.")
        return
    for user in users:
        status = "active" if user.is_active else "inactive"
        click.echo(f"{user.id:>4}  {user.email:<32} {user.role:<8} {status}")


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(Role.values())), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        user = create_user(name=name, email=email, password=password, role=role)
    except PosError as e:
        db.session.rollback()
        raise click.ClickException(str(e))
    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


@click.group('perms')
def perms_group():
    """Permission table inspection."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(list(Role.values())), help='Only operations this role may perform')
def list_perms(role):
    if role:
        for code in permissions_for_role(role):
            click.echo(code)
        return
    for code in sorted(OPERATION_ROLES):
        roles = ", ".join(sorted(r.value for r in OPERATION_ROLES[code]))
        click.echo(f"{code:<24} {roles}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
