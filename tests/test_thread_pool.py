import threading

import pytest

from lavalsim.thread_pool import ThreadPool


def _collector():
    seen = []
    lock = threading.Lock()

    def record(item):
        with lock:
            seen.append(item)

    return seen, record


@pytest.mark.parametrize("workers", [1, 2, 3, 8])
def test_every_item_is_processed_exactly_once(workers):
    items = list(range(100))
    seen, record = _collector()
    with ThreadPool(workers) as pool:
        pool.apply(items, record)
    assert sorted(seen) == items


def test_single_worker_keeps_order():
    items = ["a", "b", "c", "d"]
    seen, record = _collector()
    with ThreadPool(1) as pool:
        pool.apply(items, record)
    assert seen == items


def test_single_worker_runs_in_calling_thread():
    threads = []
    with ThreadPool(1) as pool:
        pool.apply([1, 2], lambda _: threads.append(threading.get_ident()))
    assert set(threads) == {threading.get_ident()}


def test_fewer_items_than_workers():
    items = ["x"]
    seen, record = _collector()
    with ThreadPool(4) as pool:
        assert pool.workers == 4
        pool.apply(items, record)
    assert seen == items


def test_empty_items():
    seen, record = _collector()
    with ThreadPool(3) as pool:
        assert pool.workers == 3
        pool.apply([], record)
        pool.apply(["y"], record)
    assert seen == ["y"]


def test_pool_is_reusable():
    seen, record = _collector()
    with ThreadPool(2) as pool:
        pool.apply(range(10), record)
        pool.apply(range(10, 20), record)
    assert sorted(seen) == list(range(20))


def test_generator_input_is_accepted():
    seen, record = _collector()
    with ThreadPool(2) as pool:
        pool.apply((value for value in range(7)), record)
    assert sorted(seen) == list(range(7))


@pytest.mark.parametrize("workers", [1, 3])
def test_worker_exception_is_raised(workers):
    def fail_on_three(item):
        if item == 3:
            raise ValueError("boom")

    with ThreadPool(workers) as pool:
        with pytest.raises(ValueError, match="boom"):
            pool.apply(range(6), fail_on_three)


def test_other_chunks_complete_despite_exception():
    seen, record = _collector()

    def work(item):
        if item == 0:
            raise KeyError(item)
        record(item)

    with ThreadPool(2) as pool:
        with pytest.raises(KeyError):
            pool.apply(range(10), work)
    assert sorted(seen) == list(range(5, 10))


def test_apply_after_close_raises():
    pool = ThreadPool(2)
    pool.close()
    with pytest.raises(RuntimeError):
        pool.apply([1], lambda _: None)


def test_close_is_idempotent():
    pool = ThreadPool(2)
    pool.close()
    pool.close()
    with pytest.raises(RuntimeError):
        pool.apply([], lambda _: None)


@pytest.mark.parametrize("workers", [0, -1])
def test_invalid_worker_count(workers):
    with pytest.raises(ValueError):
        ThreadPool(workers)


def test_workers_property():
    with ThreadPool(5) as pool:
        assert pool.workers == 5