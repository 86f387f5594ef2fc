"""CLI tools for care home administration."""

import asyncio

import click
from sqlalchemy.exc import SQLAlchemyError

from carehome.core.security import create_session_token
from carehome.db.enums import Role
from carehome.db.models import Membership, Organization, User
from carehome.db.session import SessionLocal


@click.group()
def cli():
    """Care home CLI tools."""
    pass


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--slug", required=True, help="URL-friendly slug (lowercase, no spaces)")
def create_org(name: str, slug: str):
    """
    Create an organization (tenant).

    Example:
        python -m carehome.cli create-org --name "Oakview Care" --slug "oakview"
    """
    db = SessionLocal()
    try:
        slug = slug.lower().strip()
        if not slug.replace("-", "").replace("_", "").isalnum():
            click.echo("❌ Slug must be alphanumeric (with optional hyphens/underscores)")
            return

        existing = db.query(Organization).filter(Organization.slug == slug).first()
        if existing:
            click.echo(f"❌ Organization with slug '{slug}' already exists")
            return

        org = Organization(name=name, slug=slug)
        db.add(org)
        db.commit()

        click.echo(f"✓ Created organization: {name}")
        click.echo(f"  ID: {org.id}")
        click.echo(f"  Slug: {slug}")
    except SQLAlchemyError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email (identity provider login)")
@click.option("--name", "display_name", required=True, help="Display name")
@click.option("--org-slug", required=True, help="Organization slug")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.CARE_ASSISTANT.value,
    show_default=True,
)
def create_user(email: str, display_name: str, org_slug: str, role: str):
    """
    Create a user with a membership in an organization.

    Example:
        python -m carehome.cli create-user --email nurse@oakview.test --name "A Nurse" --org-slug oakview --role nurse
    """
    db = SessionLocal()
    try:
        org = db.query(Organization).filter(Organization.slug == org_slug.lower()).first()
        if not org:
            click.echo(f"❌ Organization not found: {org_slug}")
            return

        email = email.lower().strip()
        if db.query(User).filter(User.email == email).first():
            click.echo(f"❌ User already exists: {email}")
            return

        user = User(email=email, display_name=display_name)
        db.add(user)
        db.flush()
        db.add(Membership(user_id=user.id, organization_id=org.id, role=role))
        db.commit()

        click.echo(f"✓ Created user {email} ({role}) in {org.name}")
        click.echo(f"  ID: {user.id}")
    except SQLAlchemyError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email to revoke sessions for")
def revoke_sessions(email: str):
    """
    Revoke all sessions for a user by bumping their token_version.

    Example:
        python -m carehome.cli revoke-sessions --email "user@example.com"
    """
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user:
            click.echo(f"❌ User not found: {email}")
            return

        old_version = user.token_version
        user.token_version += 1
        db.commit()

        click.echo(f"✓ Revoked all sessions for {email}")
        click.echo(f"  Token version: {old_version} → {user.token_version}")
    except SQLAlchemyError as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User to mint a session token for")
def issue_token(email: str):
    """Print a session token for local development (use as the session cookie)."""
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email.lower()).first()
        if not user or not user.membership:
            click.echo(f"❌ User or membership not found: {email}")
            return
        token = create_session_token(
            user.id,
            user.membership.organization_id,
            user.membership.role,
            user.token_version,
        )
        click.echo(token)
    finally:
        db.close()


@cli.command()
@click.option("--once", is_flag=True, help="Process one batch of due jobs and exit")
def run_worker(once: bool):
    """Run the background job worker."""
    from carehome import worker

    if not once:
        worker.main()
        return

    async def _run_once() -> int:
        with SessionLocal() as db:
            return await worker.process_pending_jobs(db)

    processed = asyncio.run(_run_once())
    click.echo(f"✓ Processed {processed} jobs")


if __name__ == "__main__":
    cli()
