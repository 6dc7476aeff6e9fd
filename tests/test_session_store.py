"""Tests for local storage and session persistence."""

import json

import pytest

from stitchpix.models import SessionState, UserProfile
from stitchpix.services.session_store import CREDENTIAL_KEY, TOKEN_KEY, USER_KEY, SessionStore
from stitchpix.services.storage import LocalStorage


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "state" / "storage.json"


class TestLocalStorage:
    
    def test_roundtrip_across_instances(self, storage_path):
        LocalStorage(storage_path).set_item("k", "v")
        
        assert LocalStorage(storage_path).get_item("k") == "v"
    
    def test_remove_item(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        
        assert LocalStorage(storage_path).keys() == ["b"]
    
    def test_corrupt_file_starts_empty(self, storage_path):
        storage_path.parent.mkdir(parents=True)
        storage_path.write_text("{not json")
        
        storage = LocalStorage(storage_path)
        
        assert storage.keys() == []
        storage.set_item("k", "v")
        assert json.loads(storage_path.read_text()) == {"k": "v"}
    
    def test_no_temp_files_left_behind(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item("k", "v")
        storage.clear()
        
        assert [p.name for p in storage_path.parent.iterdir()] == ["storage.json"]


class TestSessionStore:
    
    @pytest.fixture
    def storage(self, storage_path):
        return LocalStorage(storage_path)
    
    def test_empty_load(self, storage):
        state = SessionStore(storage).load()
        
        assert state == SessionState()
        assert not state.is_authenticated
    
    def test_save_then_load(self, storage, storage_path):
        state = SessionState(
            auth_token="tok",
            user=UserProfile(name="Ada", email="a@b.com"),
            credential="key",
        )
        SessionStore(storage).save(state)
        
        loaded = SessionStore(LocalStorage(storage_path)).load()
        
        assert loaded == state
        assert loaded.is_authenticated
    
    def test_entries_are_independent_strings(self, storage):
        SessionStore(storage).save(SessionState(user=UserProfile(email="a@b.com"), credential="key"))
        
        assert storage.get_item(TOKEN_KEY) is None
        assert json.loads(storage.get_item(USER_KEY))["email"] == "a@b.com"
        assert storage.get_item(CREDENTIAL_KEY) == "key"
    
    def test_corrupt_user_is_dropped(self, storage):
        storage.set_item(TOKEN_KEY, "tok")
        storage.set_item(USER_KEY, "{broken")
        storage.set_item(CREDENTIAL_KEY, "key")
        
        state = SessionStore(storage).load()
        
        assert state.user is None
        assert state.auth_token == "tok"
        assert state.credential == "key"
        assert storage.get_item(USER_KEY) is None
    
    def test_user_without_email_is_dropped(self, storage):
        storage.set_item(USER_KEY, json.dumps({"name": "nobody"}))
        
        assert SessionStore(storage).load().user is None
    
    def test_clear_keeps_credential_by_default(self, storage):
        store = SessionStore(storage)
        store.save(SessionState(auth_token="t", user=UserProfile(email="a@b.com"), credential="key"))
        
        store.clear()
        
        assert store.load() == SessionState(credential="key")
    
    def test_clear_can_drop_credential(self, storage):
        store = SessionStore(storage, keep_credential_on_logout=False)
        store.save(SessionState(auth_token="t", user=UserProfile(email="a@b.com"), credential="key"))
        
        store.clear()
        
        assert store.load() == SessionState()
    
    def test_save_credential_removes_empty(self, storage):
        store = SessionStore(storage)
        store.save_credential("key")
        store.save_credential("")
        
        assert storage.get_item(CREDENTIAL_KEY) is None


class TestSessionModels:
    
    def test_signed_out_keeps_credential(self):
        state = SessionState(auth_token="t", user=UserProfile(email="a@b.com"), credential="key")
        
        assert state.signed_out() == SessionState(credential="key")
        assert state.signed_out(keep_credential=False) == SessionState()
    
    def test_display_name_falls_back_to_email(self):
        assert UserProfile(name="Ada", email="a@b.com").display_name == "Ada"
        assert UserProfile(email="a@b.com").display_name == "a@b.com"
