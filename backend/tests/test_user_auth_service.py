"""UserService and AuthService tests."""

from datetime import timedelta

import pytest

from fabricstore.errors import AuthError, BusinessRuleError, ConflictError, ValidationError
from fabricstore.extensions import db
from fabricstore.models import SessionToken
from fabricstore.services.session_service import hash_token

PASSWORD = "Password123"


class TestUsers:

    def test_email_normalized_and_unique(self, services, admin_user):
        user = services.users.create(
            {"name": "Kim Lee", "email": "Kim@Example.COM", "password": "Secret123", "role": "viewer"},
            admin_user.id,
        )
        assert user.email == "kim@example.com"
        assert user.password_hash != "Secret123"

        with pytest.raises(ConflictError):
            services.users.create(
                {"name": "Kim Two", "email": "kim@example.com", "password": "Secret123", "role": "viewer"},
                admin_user.id,
            )

    def test_weak_password_rejected(self, services):
        with pytest.raises(ValidationError):
            services.users.create(
                {"name": "Weak", "email": "weak@example.com", "password": "password", "role": "viewer"},
                None,
            )

    def test_update_rejects_password(self, services, viewer_user, admin_user):
        with pytest.raises(ValidationError):
            services.users.update(viewer_user.id, {"password": "Secret123"}, admin_user.id)

    def test_cannot_delete_self(self, services, admin_user):
        with pytest.raises(BusinessRuleError) as exc:
            services.users.delete(admin_user.id, admin_user.id)
        assert exc.value.code == "CANNOT_DELETE_SELF"

    def test_delete_revokes_sessions(self, services, viewer_user, viewer_headers, admin_user):
        token = viewer_headers["Authorization"].split(" ", 1)[1]
        services.users.delete(viewer_user.id, admin_user.id)

        with pytest.raises(AuthError):
            services.auth.resolve_token(token)
        assert [u.id for u in services.users.get_all()] == [admin_user.id]

    def test_change_password(self, services, viewer_user):
        with pytest.raises(AuthError):
            services.users.change_password(viewer_user.id, "WrongPass1", "Another123")

        services.users.change_password(viewer_user.id, PASSWORD, "Another123")
        services.auth.login(viewer_user.email, "Another123")
        with pytest.raises(AuthError):
            services.auth.login(viewer_user.email, PASSWORD)


class TestAuth:

    def test_login_and_resolve(self, services, storekeeper_user):
        user, token = services.auth.login("KEEPER@fabric.test", PASSWORD)
        assert user.id == storekeeper_user.id
        assert len(token) == 64
        assert services.auth.resolve_token(token).id == user.id

        record = db.session.query(SessionToken).filter_by(user_id=user.id).one()
        assert record.token_hash == hash_token(token)
        assert user.last_login_at is not None

        actions = [e.action for e in services.audit.find_by_entity("user", user.id)]
        assert actions == ["create", "login"]

    @pytest.mark.parametrize(
        "email,password",
        [
            ("keeper@fabric.test", "WrongPass1"),
            ("nobody@fabric.test", PASSWORD),
            ("keeper@fabric.test", "Aa1" + "x" * 80),
            ("", ""),
        ],
    )
    def test_invalid_credentials(self, services, storekeeper_user, email, password):
        with pytest.raises(AuthError) as exc:
            services.auth.login(email, password)
        assert exc.value.code == "AUTH_INVALID"
        assert exc.value.status_code == 401

    def test_password_over_bcrypt_limit(self, services, storekeeper_user, admin_user):
        from fabricstore.services.auth_service import verify_password

        long_password = "Aa1" + "x" * 80
        assert verify_password(long_password, storekeeper_user.password_hash) is False

        with pytest.raises(ValidationError) as exc:
            services.users.create(
                {"name": "Long Pass", "email": "long@fabric.test", "password": long_password, "role": "viewer"},
                admin_user.id,
            )
        assert exc.value.field == "password"

        with pytest.raises(ValidationError):
            services.users.change_password(storekeeper_user.id, PASSWORD, long_password)
        assert services.auth.login(storekeeper_user.email, PASSWORD)[0].id == storekeeper_user.id

    def test_inactive_account(self, services, storekeeper_user, admin_user):
        services.users.update(storekeeper_user.id, {"status": "inactive"}, admin_user.id)
        with pytest.raises(AuthError) as exc:
            services.auth.login(storekeeper_user.email, PASSWORD)
        assert exc.value.code == "AUTH_INVALID"

    def test_expired_token(self, services, storekeeper_user):
        _, token = services.auth.login(storekeeper_user.email, PASSWORD)
        record = db.session.query(SessionToken).filter_by(token_hash=hash_token(token)).one()
        record.expires_at = record.created_at - timedelta(seconds=1)
        db.session.commit()

        with pytest.raises(AuthError) as exc:
            services.auth.resolve_token(token)
        assert exc.value.code == "AUTH_EXPIRED"

    def test_logout_revokes(self, services, storekeeper_user):
        _, token = services.auth.login(storekeeper_user.email, PASSWORD)
        services.auth.logout(token)

        with pytest.raises(AuthError):
            services.auth.resolve_token(token)
        actions = [e.action for e in services.audit.find_by_entity("user", storekeeper_user.id)]
        assert actions[-1] == "logout"


class TestAuditQueries:

    def test_find_paginates_and_filters(self, services, make_roll, admin_user):
        for i in range(3):
            make_roll(f"P-{i}")

        entries, total = services.audit.find({"entity_type": "roll"}, page=1, per_page=2)
        assert total == 3
        assert len(entries) == 2

        entries, _ = services.audit.find({"entity_type": "roll"}, page=2, per_page=2)
        assert len(entries) == 1

        with pytest.raises(ValidationError):
            services.audit.find({"action": "explode"})

    def test_prune(self, services, make_roll):
        from fabricstore.models import AuditLogEntry
        from fabricstore.time_utils import days_ago

        make_roll("OLD-1")
        old = db.session.query(AuditLogEntry).filter_by(entity_type="roll").one()
        old.timestamp = days_ago(400)
        db.session.commit()

        assert services.audit.prune_older_than(365) == 1
        assert db.session.query(AuditLogEntry).filter_by(entity_type="roll").count() == 0

    @staticmethod
    def _locking_session(failures):
        """Session wrapper whose first `failures` commits hit a locked database."""
        from sqlalchemy.exc import OperationalError

        class LockingSession:
            def __init__(self, real):
                self.real = real
                self.remaining = failures
                self.commits = 0

            def __getattr__(self, name):
                return getattr(self.real, name)

            def commit(self):
                self.commits += 1
                if self.remaining:
                    self.remaining -= 1
                    raise OperationalError("COMMIT", {}, Exception("database is locked"))
                self.real.commit()

        return LockingSession(db.session)

    def _age_roll_entry(self, make_roll):
        from fabricstore.models import AuditLogEntry
        from fabricstore.time_utils import days_ago

        make_roll("OLD-1")
        old = db.session.query(AuditLogEntry).filter_by(entity_type="roll").one()
        old.timestamp = days_ago(400)
        db.session.commit()

    def test_prune_retries_locked_commit(self, make_roll, monkeypatch):
        from fabricstore.models import AuditLogEntry
        from fabricstore.services.audit_service import AuditService

        monkeypatch.setattr("fabricstore.services.concurrency.time.sleep", lambda _: None)
        self._age_roll_entry(make_roll)
        session = self._locking_session(failures=1)

        assert AuditService(session).prune_older_than(365) == 1
        assert session.commits == 2
        assert db.session.query(AuditLogEntry).filter_by(entity_type="roll").count() == 0

    def test_prune_gives_up_after_retries(self, make_roll, monkeypatch):
        from fabricstore.errors import DatabaseError
        from fabricstore.models import AuditLogEntry
        from fabricstore.services.audit_service import AuditService

        monkeypatch.setattr("fabricstore.services.concurrency.time.sleep", lambda _: None)
        self._age_roll_entry(make_roll)
        session = self._locking_session(failures=3)

        with pytest.raises(DatabaseError):
            AuditService(session).prune_older_than(365)
        assert session.commits == 3
        assert db.session.query(AuditLogEntry).filter_by(entity_type="roll").count() == 1
