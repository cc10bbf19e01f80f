"""
Unit tests for the authorization policy.
"""
from types import SimpleNamespace

import pytest

from grc.core.errors import Forbidden
from grc.core.policy import (
    Action, Actor, Capability, Role,
    can_access, ensure_access, ensure_capability, has_capability, parse_role,
)

ADMIN = Actor(id=1, role=Role.ADMIN)
CLIENT = Actor(id=2, role=Role.CLIENT)
NOBODY = Actor(id=3, role=None)


class TestParseRole:
    def test_known_roles(self):
        assert parse_role("client") is Role.CLIENT
        assert parse_role("admin") is Role.ADMIN
        assert parse_role(Role.ADMIN) is Role.ADMIN

    def test_unknown_role_is_none(self):
        assert parse_role("superuser") is None
        assert parse_role(None) is None

    def test_actor_from_user(self):
        actor = Actor.from_user(SimpleNamespace(id=7, role="admin"))
        assert actor == Actor(id=7, role=Role.ADMIN)
        assert actor.is_admin


class TestCanAccess:
    @pytest.mark.parametrize("action", list(Action))
    def test_admin_allowed_everything(self, action):
        assert can_access(ADMIN, 99, action)
        assert can_access(ADMIN, None, action)

    @pytest.mark.parametrize("action", [Action.READ, Action.UPDATE, Action.DELETE])
    def test_client_allowed_on_own_records(self, action):
        assert can_access(CLIENT, CLIENT.id, action)

    @pytest.mark.parametrize("action", list(Action))
    def test_client_denied_on_others_records(self, action):
        assert not can_access(CLIENT, 99, action)

    def test_client_denied_when_owner_unknown(self):
        assert not can_access(CLIENT, None, Action.READ)

    def test_create_is_not_an_owner_action(self):
        assert not can_access(CLIENT, CLIENT.id, Action.CREATE)

    @pytest.mark.parametrize("action", list(Action))
    def test_unrecognized_role_denied(self, action):
        assert not can_access(NOBODY, NOBODY.id, action)


class TestCapabilities:
    def test_client_capabilities(self):
        assert has_capability(CLIENT, Capability.LIST_OWN_EVIDENCE)
        assert not has_capability(CLIENT, Capability.LIST_THIRD_PARTIES)
        assert not has_capability(CLIENT, Capability.INGEST_THIRD_PARTIES)
        assert not has_capability(CLIENT, Capability.MANAGE_USERS)

    def test_admin_capabilities(self):
        assert has_capability(ADMIN, Capability.LIST_THIRD_PARTIES)
        assert has_capability(ADMIN, Capability.INGEST_THIRD_PARTIES)
        assert has_capability(ADMIN, Capability.MANAGE_USERS)
        assert not has_capability(ADMIN, Capability.LIST_OWN_EVIDENCE)

    @pytest.mark.parametrize("capability", list(Capability))
    def test_unrecognized_role_has_nothing(self, capability):
        assert not has_capability(NOBODY, capability)


class TestEnsure:
    def test_ensure_access_raises_with_message(self):
        with pytest.raises(Forbidden) as exc_info:
            ensure_access(CLIENT, 99, Action.DELETE, "Forbidden: nope")
        assert exc_info.value.message == "Forbidden: nope"
        assert exc_info.value.status_code == 403

    def test_ensure_access_passes(self):
        ensure_access(CLIENT, CLIENT.id, Action.UPDATE)

    def test_ensure_capability_default_message(self):
        with pytest.raises(Forbidden) as exc_info:
            ensure_capability(CLIENT, Capability.MANAGE_USERS)
        assert exc_info.value.message == "Forbidden: Insufficient permissions"
