"""Tests for trigger routing and the ChangeNotifier subscription primitive."""

import pytest

from jsonsync.errors import ConfigurationError
from jsonsync.sync.synchronizer import create_instance
from jsonsync.sync.trigger import ChangeNotifier


@pytest.fixture
def notifier():
    return ChangeNotifier()


def test_custom_callback_is_called(client, notifier):
    calls = []
    create_instance(client, {}, {
        "collection_field_name": "players",
        "page_size": 8,
        "trigger": {"source": notifier, "custom_callback": calls.append},
    })

    notifier.notify()

    assert calls == [None]
    assert client.find_calls == []


def test_watches_custom_expression(client, notifier):
    target = {}
    client.item = {"id": "123"}
    create_instance(client, target, {
        "page_size": 16,
        "trigger": {"source": notifier, "expression": "player_id", "load_one": True},
    })

    target["player_id"] = "123"
    notifier.notify()

    assert client.find_one_calls == ["123"]
    assert target["instance"] == {"id": "123"}


def test_scalar_value_routed_to_load_fails_without_blocking_others(client, notifier):
    target = {"player_id": "123"}
    create_instance(client, target, {
        "trigger": {"source": notifier, "expression": "player_id"},
    })
    others = []
    notifier.subscribe(lambda: others.append(target["player_id"]))

    with pytest.raises(ConfigurationError):
        notifier.notify()

    assert others == ["123"]
    assert client.find_calls == []

    # The failed value was not remembered, so it is routed again
    with pytest.raises(ConfigurationError):
        notifier.notify()
    assert others == ["123", "123"]

    target["player_id"] = {"id": "123"}
    notifier.notify()

    assert client.find_calls == [({"id": "123"}, 0, 10)]
    assert others == ["123", "123", {"id": "123"}]


def test_calls_load_by_default(client, notifier):
    target = {"query": {"text_search": "ozy"}}
    create_instance(client, target, {"trigger": {"source": notifier}})

    notifier.notify()

    assert client.find_calls == [({"text_search": "ozy"}, 0, 10)]


def test_calls_load_one_when_flag_set(client, notifier):
    target = {"query": "42"}
    client.item = {"id": "42"}
    create_instance(client, target, {"trigger": {"source": notifier, "load_one": True}})

    notifier.notify()

    assert client.find_one_calls == ["42"]
    assert client.find_calls == []
    assert target["instance"] == {"id": "42"}


def test_first_notification_fires_then_only_on_change(client, notifier):
    target = {"query": {"team": "red"}}
    create_instance(client, target, {"trigger": {"source": notifier}})

    notifier.notify()
    notifier.notify()
    assert len(client.find_calls) == 1

    # In-place mutation is detected by structural comparison
    target["query"]["team"] = "blue"
    notifier.notify()
    assert len(client.find_calls) == 2
    assert client.find_calls[-1][0] == {"team": "blue"}

    target["query"] = {"team": "blue"}
    notifier.notify()
    assert len(client.find_calls) == 2


def test_on_trigger_value_changed_routes_directly(client):
    target = {}
    synchronizer = create_instance(client, target)

    synchronizer.on_trigger_value_changed({"active": True})

    assert client.find_calls == [({"active": True}, 0, 10)]


def test_close_releases_subscription(client, notifier):
    calls = []
    synchronizer = create_instance(client, {}, {
        "trigger": {"source": notifier, "custom_callback": calls.append},
    })
    assert notifier.subscriber_count == 1

    synchronizer.close()
    notifier.notify()

    assert notifier.subscriber_count == 0
    assert calls == []


def test_context_manager_closes(client, notifier):
    with create_instance(client, {}, {"trigger": {"source": notifier, "custom_callback": print}}):
        assert notifier.subscriber_count == 1
    assert notifier.subscriber_count == 0


def test_trigger_source_must_be_subscribable(client):
    with pytest.raises(ConfigurationError):
        create_instance(client, {}, {"trigger": {"source": object()}})


def test_unsubscribe_is_idempotent(notifier):
    subscription = notifier.subscribe(lambda: None)
    subscription.unsubscribe()
    subscription.unsubscribe()
    assert subscription.active is False
    assert notifier.subscriber_count == 0


def test_notify_raises_first_error_after_calling_everyone(notifier):
    calls = []

    def failing(name):
        def callback():
            calls.append(name)
            raise RuntimeError(name)
        return callback

    notifier.subscribe(failing("first"))
    notifier.subscribe(failing("second"))
    notifier.subscribe(lambda: calls.append("third"))

    with pytest.raises(RuntimeError, match="first"):
        notifier.notify()

    assert calls == ["first", "second", "third"]
