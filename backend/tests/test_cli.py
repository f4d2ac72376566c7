"""
CLI command tests.
"""

from pgims.models import Store, User


def test_system_init_is_idempotent(app, db_session):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "DONE" in result.output

    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "User exists: admin@pgims.local" in result.output

    assert db_session.query(Store).filter_by(code="MAIN").count() == 1
    assert sorted(u.role for u in db_session.query(User).all()) == ["admin", "cashier", "finance", "manager"]


def test_users_create_rejects_weak_password(app, db_session):
    runner = app.test_cli_runner()
    result = runner.invoke(
        args=["users", "create", "--name", "Weak", "--email", "weak@pgims.local", "--password", "weak", "--role", "cashier"],
    )
    assert result.exit_code != 0
    assert "Password" in result.output


def test_perms_list_for_role(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["perms", "list", "--role", "user"])
    assert result.exit_code == 0
    assert result.output.strip() == "VIEW_PRODUCTS"
