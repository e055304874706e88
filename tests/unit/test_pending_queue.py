# pylint: disable=missing-module-docstring,missing-function-docstring

from buffers.pending import PendingQueue


class Item:
    pass


def test_drain_returns_pushes_and_pops_in_submission_order():
    queue: PendingQueue[Item] = PendingQueue()
    a, b, c = Item(), Item(), Item()

    queue.request_push(a)
    queue.request_pop(c)
    queue.request_push(b)

    batch = queue.drain()

    assert batch.pushes == (a, b)
    assert batch.pops == (c,)
    assert len(queue) == 0
    assert queue.drain().is_empty()


def test_duplicate_requests_are_ignored():
    queue: PendingQueue[Item] = PendingQueue()
    a = Item()

    assert queue.request_push(a) is True
    assert queue.request_push(a) is False
    assert queue.request_pop(a) is True
    assert queue.request_pop(a) is False
    assert len(queue) == 2


def test_discard_drops_every_request_for_item():
    queue: PendingQueue[Item] = PendingQueue()
    a, b = Item(), Item()
    queue.request_push(a)
    queue.request_pop(a)
    queue.request_push(b)

    assert queue.discard(a) is True
    assert queue.discard(a) is False
    assert not queue.is_push_pending(a)
    assert queue.is_push_pending(b)
    assert queue.drain().pushes == (b,)
