from boomgw.debug_store import MAX_ENTRIES_PER_KEY, DebugErrorEntry, DebugErrorStore


def _entry(request_id, key_hash="k1"):
    return DebugErrorEntry(
        request_id=request_id,
        key_hash=key_hash,
        model="m",
        api_path="/v1/chat/completions",
        is_stream=False,
        created_at="2024-01-01T00:00:00Z",
        status_code=502,
        error_type="upstream_error",
        error_message="boom",
    )


def _enabled_store():
    store = DebugErrorStore()
    store.enabled = True
    return store


def test_disabled_by_default_and_ignores_records():
    store = DebugErrorStore()
    assert store.enabled is False
    store.record(_entry("r1"))
    assert len(store) == 0
    assert store.get("r1") is None


def test_record_and_get():
    store = _enabled_store()
    entry = _entry("r1")
    store.record(entry)
    assert store.get("r1") == entry
    assert store.list_for_key("k1") == [entry]
    assert len(store) == 1


def test_evicts_oldest_per_key():
    store = _enabled_store()
    ids = [f"r{i}" for i in range(MAX_ENTRIES_PER_KEY + 2)]
    for rid in ids:
        store.record(_entry(rid))
    kept = [e.request_id for e in store.list_for_key("k1")]
    assert kept == ids[-MAX_ENTRIES_PER_KEY:]
    assert len(store) == MAX_ENTRIES_PER_KEY
    assert store.get(ids[0]) is None


def test_keys_are_independent():
    store = _enabled_store()
    for rid in ("a1", "a2", "a3", "a4"):
        store.record(_entry(rid, "ka"))
    store.record(_entry("b1", "kb"))
    assert [e.request_id for e in store.list_for_key("kb")] == ["b1"]
    assert len(store) == MAX_ENTRIES_PER_KEY + 1
    assert store.list_for_key("unknown") == []


def test_disable_clears_entries():
    store = _enabled_store()
    store.record(_entry("r1"))
    store.enabled = False
    assert len(store) == 0
    store.enabled = True
    assert store.list_for_key("k1") == []


def test_clear_keeps_enabled():
    store = _enabled_store()
    store.record(_entry("r1"))
    store.clear()
    assert len(store) == 0
    store.record(_entry("r2"))
    assert store.get("r2").request_id == "r2"


def test_entry_to_dict_holds_all_fields():
    entry = _entry("r1")
    data = entry.to_dict()
    assert DebugErrorEntry(**data) == entry
    assert data["upstream_status"] is None