"""Tests for snapshot storage backends."""

import json
from unittest.mock import patch

import pytest

from ledger.engine import add_transfer, create_profile
from ledger.models import CASH_METHOD_ID, AuditEventBuilder, LedgerSnapshot, TransferLink
from ledger.services.storage import (
    InMemoryAuditStorage,
    InMemoryProfileStorage,
    JsonFileProfileStorage,
    StorageConnectionError,
    StorageError,
)


@pytest.fixture
def snapshot(funded_data) -> LedgerSnapshot:
    data = add_transfer(
        funded_data, from_method_id=CASH_METHOD_ID, to_method_id="bank-1", amount="40", date="2024-01-05",
    )
    profile = create_profile("Casa", "ES", "EUR").model_copy(update={"data": data})
    return LedgerSnapshot(profiles=[profile], active_profile_id=profile.id)


class TestJsonFileProfileStorage:
    """Tests for the JSON file backend."""

    def test_missing_file_loads_empty(self, tmp_path):
        """Test that a fresh install starts with no profiles."""
        storage = JsonFileProfileStorage(tmp_path / "profiles.json")
        assert storage.load() == LedgerSnapshot()

    def test_save_then_load(self, tmp_path, snapshot):
        """Test that what is saved is what is loaded."""
        storage = JsonFileProfileStorage(tmp_path / "nested" / "profiles.json")
        assert storage.save(snapshot)
        assert storage.load() == snapshot

    def test_file_uses_camel_case(self, tmp_path, snapshot):
        """Test the persisted layout."""
        path = tmp_path / "profiles.json"
        JsonFileProfileStorage(path).save(snapshot)
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["activeProfileId"] == snapshot.active_profile_id
        first = raw["profiles"][0]["data"]["transactions"][0]
        assert first["paymentMethodId"] == CASH_METHOD_ID
        assert first["linkage"]["kind"] == "transfer"

    def test_no_temp_files_left_behind(self, tmp_path, snapshot):
        """Test the atomic replace."""
        JsonFileProfileStorage(tmp_path / "profiles.json").save(snapshot)
        assert [p.name for p in tmp_path.iterdir()] == ["profiles.json"]

    def test_legacy_file_is_lifted(self, tmp_path):
        """Test that flat transferId fields load as transfer links."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({
            "profiles": [{
                "id": "p1",
                "name": "Casa",
                "countryCode": "ES",
                "currency": "EUR",
                "data": {
                    "transactions": [{
                        "id": "t1",
                        "description": "Transferencia: Efectivo → Banco",
                        "amount": 40,
                        "date": "2024-01-05",
                        "type": "expense",
                        "paymentMethodId": CASH_METHOD_ID,
                        "transferId": "tr-1",
                    }],
                },
            }],
            "activeProfileId": "p1",
        }), encoding="utf-8")

        loaded = JsonFileProfileStorage(path).load()
        transaction = loaded.get_profile("p1").data.transactions[0]
        assert transaction.linkage == TransferLink(transfer_id="tr-1")

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        """Test that unreadable content is reported, not silently dropped."""
        path = tmp_path / "profiles.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFileProfileStorage(path).load()

    def test_write_errors_are_retried_then_raised(self, tmp_path, snapshot):
        """Test that persistent OS errors surface as StorageConnectionError."""
        storage = JsonFileProfileStorage(tmp_path / "profiles.json", retry_attempts=2)
        with patch("ledger.services.storage.json_file.os.replace", side_effect=OSError("disk full")) as replace:
            with pytest.raises(StorageConnectionError):
                storage.save(snapshot)
        assert replace.call_count == 2
        assert not (tmp_path / "profiles.json").exists()


class TestInMemoryStorage:
    """Tests for the in-memory backends."""

    def test_profile_storage(self, snapshot):
        """Test save/load and simulated failures."""
        storage = InMemoryProfileStorage()
        storage.save(snapshot)
        assert storage.load() is snapshot
        assert storage.save_count == 1

        storage.fail_saves = True
        with pytest.raises(StorageConnectionError):
            storage.save(LedgerSnapshot())
        assert storage.load() is snapshot

    def test_audit_storage(self):
        """Test append-only audit events."""
        storage = InMemoryAuditStorage()
        storage.append_event(AuditEventBuilder.profile_selected("p1"))
        storage.append_event(AuditEventBuilder.profile_deleted("p2", 3))
        assert [e.profile_id for e in storage.get_recent_events()] == ["p2", "p1"]
        assert len(storage.get_events_for_profile("p1")) == 1
