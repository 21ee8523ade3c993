import asyncio
import threading

import pytest

from donations_app.core.exceptions import GatewayError, StreamClosedError
from donations_app.core.streams import LifecycleStream
from donations_app.models.events import EventState, LifecycleEvent


def test_listener_receives_current_event_then_future_ones():
    stream = LifecycleStream()
    seen = []
    stream.listen(seen.append)
    stream.publish(LifecycleEvent.loading(1))
    stream.publish(LifecycleEvent.done("payload", 1))

    assert [event.state for event in seen] == [EventState.IDLE, EventState.LOADING, EventState.DONE]
    assert seen[-1].data == "payload"


def test_late_listener_sees_only_latest_event():
    stream = LifecycleStream()
    stream.publish(LifecycleEvent.loading(1))
    stream.publish(LifecycleEvent.error(GatewayError(code="transport", message="down"), 1))

    seen = []
    stream.listen(seen.append)
    assert len(seen) == 1
    assert seen[0].state is EventState.ERROR
    assert seen[0].cause.code == "transport"


def test_listener_without_replay_waits_for_next_event():
    stream = LifecycleStream()
    seen = []
    stream.listen(seen.append, replay=False)
    assert seen == []
    stream.publish(LifecycleEvent.loading(1))
    assert [event.state for event in seen] == [EventState.LOADING]


def test_unsubscribe_stops_delivery():
    stream = LifecycleStream()
    seen = []
    unsubscribe = stream.listen(seen.append, replay=False)
    unsubscribe()
    unsubscribe()
    stream.publish(LifecycleEvent.loading(1))
    assert seen == []
    assert stream.subscriber_count == 0


def test_failing_listener_does_not_block_others():
    stream = LifecycleStream()
    seen = []

    def broken(_event):
        raise ValueError("boom")

    stream.listen(broken, replay=False)
    stream.listen(seen.append, replay=False)
    stream.publish(LifecycleEvent.loading(1))
    assert len(seen) == 1


def test_async_subscribers_consume_independently():
    async def scenario():
        stream = LifecycleStream()
        fast = stream.subscribe()
        slow = stream.subscribe(replay=False)

        stream.publish(LifecycleEvent.loading(1))
        first = [await fast.__anext__(), await fast.__anext__()]
        stream.publish(LifecycleEvent.done(42, 1))
        stream.close()

        rest = [event async for event in fast]
        slow_events = [event async for event in slow]
        return first, rest, slow_events

    first, rest, slow_events = asyncio.run(scenario())
    assert [event.state for event in first] == [EventState.IDLE, EventState.LOADING]
    assert [event.state for event in rest] == [EventState.DONE]
    assert [event.state for event in slow_events] == [EventState.LOADING, EventState.DONE]


def test_pending_drains_without_waiting_and_cancel_detaches():
    stream = LifecycleStream()
    subscription = stream.subscribe()
    stream.publish(LifecycleEvent.loading(1))
    assert [event.state for event in subscription.pending()] == [EventState.IDLE, EventState.LOADING]
    assert subscription.pending() == []

    subscription.cancel()
    stream.publish(LifecycleEvent.done(1, 1))
    assert subscription.pending() == []
    assert stream.subscriber_count == 0


def test_publish_after_close_is_rejected():
    stream = LifecycleStream()
    stream.close()
    stream.close()
    assert stream.closed
    with pytest.raises(StreamClosedError):
        stream.publish(LifecycleEvent.loading(1))
    with pytest.raises(StreamClosedError):
        stream.listen(lambda _event: None)


def test_subscribe_after_close_replays_and_finishes():
    stream = LifecycleStream()
    stream.publish(LifecycleEvent.loading(1))
    stream.close()
    subscription = stream.subscribe()
    assert [event.state for event in subscription.pending()] == [EventState.LOADING]
    assert subscription.pending() == []


def test_events_published_from_another_thread_reach_async_subscriber():
    async def scenario():
        stream = LifecycleStream()
        subscription = stream.subscribe(replay=False)

        def worker():
            stream.publish(LifecycleEvent.loading(1))
            stream.publish(LifecycleEvent.done("remote", 1))
            stream.close()

        thread = threading.Thread(target=worker)
        thread.start()
        events = [event async for event in subscription]
        thread.join()
        return events

    events = asyncio.run(scenario())
    assert [event.state for event in events] == [EventState.LOADING, EventState.DONE]
    assert events[-1].data == "remote"
