import pytest
from fastapi import FastAPI

from codexsun.apps import system
from codexsun.core.app_loader import load_provider, load_providers, provider_name, register_apps


def sync_provider(app):
    app.state.sync_registered = True


class ProviderObject:
    def __call__(self, app):
        app.state.object_registered = True


provider_object = ProviderObject()
not_callable = 42


class TestLoadProvider:
    def test_load_by_spec(self):
        assert load_provider("codexsun.apps.system:register") is system.register

    def test_load_other_attribute(self):
        assert load_provider("codexsun.apps.system:create_system_router") is system.create_system_router

    def test_malformed_spec(self):
        with pytest.raises(ValueError):
            load_provider("codexsun.apps.system")

    def test_missing_module(self):
        with pytest.raises(ImportError):
            load_provider("codexsun.apps.nope:register")

    def test_missing_attribute(self):
        with pytest.raises(AttributeError):
            load_provider("codexsun.apps.system:nope")

    def test_not_callable(self):
        with pytest.raises(ValueError, match="not callable"):
            load_provider(f"{__name__}:not_callable")

    def test_load_many(self):
        providers = load_providers([f"{__name__}:sync_provider", "codexsun.apps.system:register"])
        assert providers == [sync_provider, system.register]

    def test_provider_name(self):
        assert provider_name(system.register) == "codexsun.apps.system:register"


@pytest.mark.asyncio
class TestRegisterApps:
    async def test_sync_async_and_object_providers(self):
        app = FastAPI()
        count = await register_apps(app, [sync_provider, system.register, provider_object])

        assert count == 3
        assert app.state.sync_registered is True
        assert app.state.object_registered is True
        assert "/health" in [route.path for route in app.routes]

    async def test_string_specs_are_resolved(self):
        app = FastAPI()
        await register_apps(app, ["codexsun.apps.system:register"])
        assert "/health" in [route.path for route in app.routes]

    async def test_providers_run_in_order(self):
        order = []

        async def first(app):
            order.append("first")

        def second(app):
            order.append("second")

        await register_apps(FastAPI(), [first, second])
        assert order == ["first", "second"]

    async def test_provider_error_propagates(self):
        async def broken(app):
            raise RuntimeError("cannot register")

        with pytest.raises(RuntimeError, match="cannot register"):
            await register_apps(FastAPI(), [broken])
