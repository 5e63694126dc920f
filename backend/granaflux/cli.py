# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/granaflux/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (no data is touched).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Company management:
# - python -m flask companies create --name "Padaria Central" --owner-email dono@padaria.com --owner-password "segredo1"
#   Create a company with its OWNER user and the default categories.
#
# User inspection:
# - python -m flask users list [--company-id 1]
#   List users with role and active status.

import click
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import User
from .services.auth_service import PasswordValidationError, register_company, validate_password_strength


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables from the model metadata."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database ready. Run 'python -m flask companies create' to add the first company.")


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

    click.echo("PASS Database reset complete.")


# =============================================================================
# COMPANY MANAGEMENT COMMANDS
# =============================================================================

@click.group('companies')
def companies_group():
    """Company (tenant) management commands."""


@companies_group.command('create')
@click.option('--name', required=True, help='Company name')
@click.option('--owner-email', required=True, help='Email of the OWNER user')
@click.option('--owner-password', required=True, help='Password of the OWNER user')
@click.option('--owner-name', default=None, help='Display name of the OWNER (defaults to the email)')
@click.option('--cnpj', default=None, help='Company CNPJ (optional, unique)')
@with_appcontext
def create_company_cli(name, owner_email, owner_password, owner_name, cnpj):
    """Create a company, its OWNER and the default categories."""
    try:
        validate_password_strength(owner_password)
    except PasswordValidationError as e:
        click.echo(f"FAIL {e.errors[0]['message']}")
        return

    try:
        owner, _ = register_company(
            email=owner_email.strip().lower(),
            password=owner_password,
            name=owner_name or owner_email,
            company_name=name,
            cnpj=cnpj,
            user_agent="flask-cli",
        )
    except ServiceError as e:
        click.echo(f"FAIL {e.message}")
        return

    click.echo(f"PASS Created company: {owner.company.name} (ID: {owner.company_id})")
    click.echo(f"PASS Created OWNER: {owner.email} (ID: {owner.id})")


# =============================================================================
# USER INSPECTION COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@click.option('--company-id', type=int, help='Filter by company ID')
@with_appcontext
def list_users(company_id):
    """List users with their role."""
    query = db.session.query(User)

    if company_id:
        query = query.filter_by(company_id=company_id)

    users = query.order_by(User.company_id.asc(), User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Comp':<5} {'Name':<25} {'Email':<35} {'Active':<8} {'Role'}")
    click.echo("="*100)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.company_id:<5} {user.name:<25} {user.email:<35} {active_str:<8} {user.role}")

    click.echo("="*100 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(companies_group)
    app.cli.add_command(users_group)
