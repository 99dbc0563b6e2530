from benq_projector.client import ConnectionState, PendingRequests


def test_pending_resolve_returns_latency():
    pending = PendingRequests()
    pending.add("vol", 10.0, 5.0)
    assert "vol" in pending
    assert pending.resolve("vol", 10.5) == 0.5
    assert "vol" not in pending
    assert pending.resolve("vol", 11.0) is None


def test_pending_expire():
    pending = PendingRequests()
    pending.add("vol", 0.0, 5.0)
    pending.add("sour", 3.0, 5.0)
    assert pending.expire(4.0) == []
    assert pending.expire(5.0) == ["vol"]
    assert len(pending) == 1
    assert pending.expire(100.0) == ["sour"]
    assert len(pending) == 0


def test_context_defaults(context):
    assert context.connection_state == ConnectionState.DISCONNECTED
    assert not context.is_connected
    assert context.device_state == {}
    assert not context.gate.can_send.is_open


def test_clear_device_state(context):
    context.device_state["pow"] = True
    context.pending.add("vol", 0.0, 5.0)
    context.clear_device_state()
    assert context.device_state == {}
    assert len(context.pending) == 0
