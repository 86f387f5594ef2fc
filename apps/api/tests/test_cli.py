"""Tests for the admin CLI."""
from click.testing import CliRunner

from carehome.cli import cli
from carehome.core.security import decode_session_token
from carehome.db.models import Membership, Organization, User


def test_create_org_and_user(db):
    runner = CliRunner()

    result = runner.invoke(cli, ["create-org", "--name", "Oakview Care", "--slug", "Oakview"])
    assert result.exit_code == 0
    assert "Created organization" in result.output

    result = runner.invoke(cli, ["create-org", "--name", "Again", "--slug", "oakview"])
    assert "already exists" in result.output

    result = runner.invoke(
        cli,
        ["create-user", "--email", "Nurse@Oakview.test", "--name", "A Nurse",
         "--org-slug", "oakview", "--role", "nurse"],
    )
    assert result.exit_code == 0

    db.expire_all()
    org = db.query(Organization).filter(Organization.slug == "oakview").one()
    user = db.query(User).filter(User.email == "nurse@oakview.test").one()
    membership = db.query(Membership).filter(Membership.user_id == user.id).one()
    assert membership.organization_id == org.id
    assert membership.role == "nurse"


def test_create_org_rejects_bad_slug(db):
    result = CliRunner().invoke(cli, ["create-org", "--name", "X", "--slug", "bad slug!"])
    assert "alphanumeric" in result.output
    assert db.query(Organization).count() == 0


def test_create_user_unknown_org(db):
    result = CliRunner().invoke(
        cli, ["create-user", "--email", "a@b.test", "--name", "A", "--org-slug", "nowhere"]
    )
    assert "Organization not found" in result.output


def test_revoke_sessions_and_issue_token(db, test_user):
    runner = CliRunner()

    result = runner.invoke(cli, ["issue-token", "--email", test_user.email])
    assert result.exit_code == 0
    claims = decode_session_token(result.output.strip())
    assert claims.sub == test_user.id
    assert claims.role == "manager"
    assert claims.token_version == 1

    result = runner.invoke(cli, ["revoke-sessions", "--email", test_user.email])
    assert result.exit_code == 0
    assert "1 → 2" in result.output

    db.expire_all()
    assert db.get(User, test_user.id).token_version == 2
