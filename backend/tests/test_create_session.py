import pytest
from sqlmodel import Session, select

from app.core.auth import resolve_actor
from app.core.errors import AuthError
from app.create_session import main
from app.models import UserSession


def test_issue_token_prints_resolvable_token(engine, capsys):
    assert main(["--name", "熊沢", "--email", "kumazawa@example.jp"], engine=engine) == 0
    token = capsys.readouterr().out.strip()

    with Session(engine) as ses:
        assert resolve_actor(ses, token).display_name == "熊沢"
        row = ses.exec(select(UserSession)).one()
        assert row.email == "kumazawa@example.jp"
        assert row.token != token


def test_ttl_hours(engine, capsys):
    assert main(["--name", "熊沢", "--ttl-hours", "2"], engine=engine) == 0
    with Session(engine) as ses:
        row = ses.exec(select(UserSession)).one()
        assert (row.expires_at - row.created_at).total_seconds() == 2 * 3600


def test_revoke(engine, capsys):
    main(["--name", "熊沢"], engine=engine)
    token = capsys.readouterr().out.strip()

    assert main(["--revoke", token], engine=engine) == 0
    with Session(engine) as ses:
        with pytest.raises(AuthError):
            resolve_actor(ses, token)

    # 二重 revoke はエラー終了
    assert main(["--revoke", token], engine=engine) == 1


def test_blank_name_fails(engine, capsys):
    assert main(["--name", "  "], engine=engine) == 1
    assert "display_name" in capsys.readouterr().err
    with Session(engine) as ses:
        assert ses.exec(select(UserSession)).all() == []


def test_non_positive_ttl_is_rejected(engine):
    assert main(["--name", "熊沢", "--ttl-hours", "0"], engine=engine) == 2


def test_name_or_revoke_required(engine):
    with pytest.raises(SystemExit):
        main([], engine=engine)
