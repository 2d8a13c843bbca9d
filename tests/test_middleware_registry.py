from unittest.mock import AsyncMock, Mock

import pytest

from api_http_protocol.message import RequestMessage
from api_http_protocol.middleware.registry import MiddlewareRegistry
from api_http_protocol.middleware.stage import Stage


class Middleware1:
    async def __call__(self, message) -> None:
        await message.next()


class Middleware2:
    async def __call__(self, message) -> None:
        await message.next()


class Middleware3:
    def __init__(self, label: str = "") -> None:
        self.label = label

    async def __call__(self, message) -> None:
        await message.next()


def test_middleware_registry_ordering() -> None:
    registry = MiddlewareRegistry()

    registry.register(Middleware2, stage=Stage.BEFORE_SEND, order=1)
    registry.register(Middleware1, order=10)
    registry.register(Middleware3, stage=Stage.OBSERVE, order=99)

    ordered = [entry.handler for entry in registry.get_ordered_entries()]

    assert isinstance(ordered[0], Middleware3)
    assert isinstance(ordered[1], Middleware1)
    assert isinstance(ordered[2], Middleware2)


def test_middleware_registry_decorator() -> None:
    registry = MiddlewareRegistry()

    @registry.add(stage=Stage.BEFORE_SEND, order=5)
    class DecoratedMiddleware:
        async def __call__(self, message) -> None:
            await message.next()

    @registry.add
    async def stamp(message) -> None:
        await message.next()

    entries = registry.get_ordered_entries()
    assert len(entries) == 2
    assert entries[0].handler is stamp
    assert isinstance(entries[1].handler, DecoratedMiddleware)
    assert entries[1].stage is Stage.BEFORE_SEND


def test_middleware_registry_factory() -> None:
    registry = MiddlewareRegistry()

    factory_mock = Mock(return_value=Middleware1())

    registry.register(Middleware1, factory=factory_mock, foo="bar")

    entries = registry.get_ordered_entries()
    assert len(entries) == 1
    factory_mock.assert_called_once()
    assert factory_mock.call_args[1]["foo"] == "bar"


def test_middleware_registry_kwargs_build_class() -> None:
    registry = MiddlewareRegistry()
    registry.register(Middleware3, label="signed")

    (entry,) = registry.get_ordered_entries()
    assert entry.handler.label == "signed"


def test_middleware_registry_rejects_kwargs_for_function() -> None:
    registry = MiddlewareRegistry()

    async def plain(message) -> None:
        await message.next()

    registry.register(plain, label="x")

    with pytest.raises(TypeError, match="kwargs need a factory"):
        registry.get_ordered_entries()


def test_middleware_registry_rejects_io_stage() -> None:
    registry = MiddlewareRegistry()

    with pytest.raises(ValueError, match="io stages"):
        registry.register(Middleware1, stage=Stage.IO_WRITE)


def test_middleware_registry_clear() -> None:
    registry = MiddlewareRegistry()
    registry.register(Middleware1)
    registry.clear()
    assert len(registry.get_ordered_entries()) == 0
    assert len(registry) == 0


@pytest.mark.asyncio()
async def test_middleware_registry_installs_onto_each_message() -> None:
    registry = MiddlewareRegistry()
    seen: list[RequestMessage] = []

    @registry.add
    async def track(message) -> None:
        seen.append(message)
        await message.next()

    first, second = RequestMessage(), RequestMessage()
    for message in (first, second):
        registry.install(message)
        message.chain.set_io(AsyncMock(), Stage.IO_WRITE)
        await message.run()

    assert seen == [first, second]


@pytest.mark.asyncio()
async def test_middleware_registry_builds_fresh_instance_per_message() -> None:
    registry = MiddlewareRegistry()

    @registry.add
    class Counter:
        def __init__(self) -> None:
            self.calls = 0

        async def __call__(self, message) -> None:
            self.calls += 1
            await message.next()

    first, second = RequestMessage(), RequestMessage()
    for message in (first, second):
        registry.install(message)
        message.chain.set_io(AsyncMock(), Stage.IO_WRITE)
    await first.run()
    await first.run()
    await second.run()

    first_counter = first.chain.entries[0].handler
    second_counter = second.chain.entries[0].handler
    assert first_counter is not second_counter
    assert first_counter.calls == 2
    assert second_counter.calls == 1
