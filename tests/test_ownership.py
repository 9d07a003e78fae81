"""
Tests for the two-step ownership transfer.

Tests cover:
- Initial owner assignment
- Requesting a transfer (owner only, null target rejected)
- Accepting a transfer (pending owner only)
- Renounce is unsupported
- Audit events for administrative changes
"""
import pytest

from encrypted_storage import (
    EncryptedStorage,
    InvalidArgument,
    Unauthorized,
    Unsupported,
)
from encrypted_storage.ownership import ZERO_ADDRESS, is_null_identity

from tests.helpers import ALICE, BOB, OWNER


class TestDeployment:
    """Tests for initial administrator state."""

    def test_owner_is_set(self, storage):
        assert storage.owner() == OWNER

    def test_no_pending_owner(self, storage):
        assert storage.pending_owner() is None

    def test_null_initial_owner_rejected(self):
        with pytest.raises(InvalidArgument):
            EncryptedStorage(owner=ZERO_ADDRESS)


class TestNullIdentity:

    @pytest.mark.parametrize("identity", [None, "", "  ", ZERO_ADDRESS, "0X" + "0" * 40])
    def test_null_identities(self, identity):
        assert is_null_identity(identity) is True

    def test_regular_identity(self):
        assert is_null_identity(ALICE) is False


class TestTransferRequest:
    """Tests for requesting an ownership transfer."""

    def test_non_owner_cannot_request(self, storage):
        with pytest.raises(Unauthorized):
            storage.transfer_ownership(ALICE, BOB)
        assert storage.pending_owner() is None

    def test_owner_can_request(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        assert storage.pending_owner() == ALICE
        # Owner does not change until accepted
        assert storage.owner() == OWNER

    def test_null_target_rejected(self, storage):
        with pytest.raises(InvalidArgument):
            storage.transfer_ownership(OWNER, ZERO_ADDRESS)
        with pytest.raises(InvalidArgument):
            storage.transfer_ownership(OWNER, None)
        assert storage.pending_owner() is None

    @pytest.mark.parametrize("new_owner", [12345, b"0xaaaa", object()])
    def test_non_string_target_rejected(self, storage, new_owner):
        with pytest.raises(InvalidArgument):
            storage.transfer_ownership(OWNER, new_owner)
        assert storage.pending_owner() is None

    def test_later_request_replaces_pending(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        storage.transfer_ownership(OWNER, BOB)
        assert storage.pending_owner() == BOB
        with pytest.raises(Unauthorized):
            storage.accept_ownership(ALICE)


class TestTransferAccept:
    """Tests for accepting an ownership transfer."""

    def test_pending_owner_accepts(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        storage.accept_ownership(ALICE)
        assert storage.owner() == ALICE
        assert storage.pending_owner() is None

    def test_outgoing_owner_cannot_accept(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        with pytest.raises(Unauthorized):
            storage.accept_ownership(OWNER)
        assert storage.owner() == OWNER
        assert storage.pending_owner() == ALICE

    def test_third_party_cannot_accept(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        with pytest.raises(Unauthorized):
            storage.accept_ownership(BOB)

    def test_accept_without_pending(self, storage):
        with pytest.raises(Unauthorized):
            storage.accept_ownership(ALICE)

    def test_previous_owner_loses_admin_rights(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        storage.accept_ownership(ALICE)
        with pytest.raises(Unauthorized):
            storage.change_fee(OWNER, 1)
        storage.change_fee(ALICE, 1)
        assert storage.fee() == 1


class TestRenounce:

    def test_owner_cannot_renounce(self, storage):
        with pytest.raises(Unsupported):
            storage.renounce_ownership(OWNER)
        assert storage.owner() == OWNER

    def test_anyone_cannot_renounce(self, storage):
        with pytest.raises(Unsupported):
            storage.renounce_ownership(ALICE)


class TestOwnershipEvents:
    """Tests for administrative audit trail."""

    def test_transfer_emits_events(self, storage):
        storage.transfer_ownership(OWNER, ALICE)
        storage.accept_ownership(ALICE)
        names = [event.name for event in storage.events()]
        assert names == ["OwnershipTransferStarted", "OwnershipTransferred"]
        last = storage.events()[-1]
        assert last.args == {"previous_owner": OWNER, "new_owner": ALICE}

    def test_failed_calls_emit_nothing(self, storage):
        with pytest.raises(Unauthorized):
            storage.transfer_ownership(ALICE, BOB)
        assert storage.events() == []

    def test_listener_receives_events(self, storage):
        received = []
        storage.add_listener(received.append)
        storage.transfer_ownership(OWNER, BOB)
        assert [event.name for event in received] == ["OwnershipTransferStarted"]
