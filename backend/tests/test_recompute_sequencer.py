import threading
from app.services.recompute import RecomputeSequencer

def test_newer_completion_blocks_older_result():
    seq = RecomputeSequencer()
    older = seq.start("u1")
    newer = seq.start("u1")

    with seq.write_slot("u1", newer) as allowed:
        assert allowed
    # the older recompute finishes last and must not overwrite
    with seq.write_slot("u1", older) as allowed:
        assert not allowed

def test_in_order_completions_all_write():
    seq = RecomputeSequencer()
    for _ in range(3):
        ticket = seq.start("u1")
        with seq.write_slot("u1", ticket) as allowed:
            assert allowed

def test_users_are_independent():
    seq = RecomputeSequencer()
    a = seq.start("a")
    b1 = seq.start("b")
    b2 = seq.start("b")
    with seq.write_slot("b", b2) as allowed:
        assert allowed
    with seq.write_slot("a", a) as allowed:
        assert allowed
    with seq.write_slot("b", b1) as allowed:
        assert not allowed

def test_failed_write_does_not_count_as_completed():
    seq = RecomputeSequencer()
    first = seq.start("u1")
    second = seq.start("u1")
    try:
        with seq.write_slot("u1", second):
            raise RuntimeError("store down")
    except RuntimeError:
        pass
    with seq.write_slot("u1", first) as allowed:
        assert allowed

def test_one_user_writing_does_not_block_another():
    seq = RecomputeSequencer()
    a = seq.start("a")
    b = seq.start("b")
    results = []

    def write_b():
        with seq.write_slot("b", b) as allowed:
            results.append(allowed)

    with seq.write_slot("a", a) as allowed:
        assert allowed
        worker = threading.Thread(target=write_b)
        worker.start()
        worker.join(timeout=2)
        assert not worker.is_alive()
    assert results == [True]
