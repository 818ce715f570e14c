import threading
import time

import pytest

from spend_analysis.pmap import p_map


def test_inline_when_concurrency_is_one():
    seen: list[int] = []

    def mapper(x: int) -> int:
        seen.append(threading.get_ident())
        return x * 2

    assert p_map(range(5), mapper, concurrency=1) == [0, 2, 4, 6, 8]
    assert set(seen) == {threading.get_ident()}


def test_results_keep_input_order_when_workers_finish_out_of_order():
    def mapper(x: int) -> int:
        time.sleep(0.01 * (5 - x))
        return x

    assert p_map(range(6), mapper, concurrency=3) == list(range(6))


def test_in_flight_calls_bounded_by_concurrency():
    lock = threading.Lock()
    active = 0
    peak = 0

    def mapper(x: int) -> int:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.005)
        with lock:
            active -= 1
        return x

    p_map(range(20), mapper, concurrency=3)

    assert 1 <= peak <= 3


def test_first_error_propagates():
    def mapper(x: int) -> int:
        if x == 2:
            raise RuntimeError("boom")
        return x

    with pytest.raises(RuntimeError, match="boom"):
        p_map(range(5), mapper, concurrency=2)


def test_empty_iterable():
    assert p_map([], lambda x: x, concurrency=4) == []


@pytest.mark.parametrize("bad", [0, -1, True, 1.5])
def test_invalid_concurrency(bad):
    with pytest.raises(ValueError):
        p_map([1], lambda x: x, concurrency=bad)
