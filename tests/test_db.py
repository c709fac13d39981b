import pytest
from sqlalchemy.exc import IntegrityError

from app.utils import run_in_transaction, transactional
from models import db
from models.platform import PlatformSettings


def _conflict():
    return IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))


def test_transactional_commits(app):
    with transactional():
        db.session.add(PlatformSettings(platform_name="Prato"))
    db.session.expunge_all()
    assert PlatformSettings.current().platform_name == "Prato"


def test_transactional_rolls_back_and_reraises(app):
    with pytest.raises(ValueError):
        with transactional("boom"):
            db.session.add(PlatformSettings(platform_name="Prato"))
            db.session.flush()
            raise ValueError("nope")
    assert PlatformSettings.query.count() == 0


def test_run_in_transaction_retries_conflicts(app):
    calls = []

    def work(name):
        calls.append(name)
        if len(calls) == 1:
            raise _conflict()
        settings = PlatformSettings(platform_name=name)
        db.session.add(settings)
        return settings

    settings = run_in_transaction(work, "Prato", retries=2)
    assert calls == ["Prato", "Prato"]
    assert settings.id is not None


def test_run_in_transaction_gives_up(app):
    def work():
        raise _conflict()

    with pytest.raises(IntegrityError):
        run_in_transaction(work, retries=1)


def test_other_errors_are_not_retried(app):
    calls = []

    def work():
        calls.append(1)
        raise ValueError("bad")

    with pytest.raises(ValueError):
        run_in_transaction(work, retries=3)
    assert calls == [1]
