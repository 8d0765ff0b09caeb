import redis

from barbersmart.cache import Cache
from barbersmart.domain.conversations.store import ConversationContext, ConversationStore, conversation_key


class BrokenRedis:
    """Client whose every call fails like a dropped connection"""

    def get(self, key):
        raise redis.ConnectionError("connection reset")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection reset")


def test_key_uses_normalized_phone():
    assert conversation_key(1, "(11) 99999-8888") == "conversation:1:5511999998888"
    assert conversation_key(1, "+55 11 99999-8888") == conversation_key(1, "11999998888")


def test_save_and_get(store):
    context = ConversationContext(step="awaiting_reschedule_choice", data={"appointment_id": 7})

    assert store.save(1, "11999998888", context)
    assert store.get(1, "(11) 99999-8888") == context


def test_save_replaces_previous_context(store):
    store.save(1, "11999998888", ConversationContext(step="a"))
    store.save(1, "11999998888", ConversationContext(step="b", data={"x": 1}))
    assert store.get(1, "11999998888") == ConversationContext(step="b", data={"x": 1})


def test_contexts_are_isolated_per_barbershop(store):
    store.save(1, "11999998888", ConversationContext(step="a"))
    assert store.get(2, "11999998888") is None


def test_context_expires(fake_redis):
    store = ConversationStore(backend=Cache(client=fake_redis), ttl=60)
    store.save(1, "11999998888", ConversationContext())
    assert 0 < fake_redis.ttl("conversation:1:5511999998888") <= 60


def test_unreadable_value_is_ignored(fake_redis, store):
    fake_redis.set("conversation:1:5511999998888", "not json")
    assert store.get(1, "11999998888") is None


def test_redis_failure_fails_open():
    cache = Cache(client=BrokenRedis())
    assert cache.get("k") is None
    assert cache.set("k", {"a": 1}) is False

    store = ConversationStore(backend=cache)
    assert store.save(1, "11999998888", ConversationContext()) is False
    assert store.get(1, "11999998888") is None
