"""
Tests for the call wrapper generator.

Runs the whole pipeline on the fixture services: extraction, import
resolution, builtins, synthesis and the conditional write.
"""

from __future__ import annotations

import hashlib
import shutil
import tempfile
from pathlib import Path

import pytest

from moleculer_call_wrapper.pipeline import CallWrapperGenerator, GeneratorConfig, create_wrapper_call
from moleculer_call_wrapper.pipeline.descriptors import ActionSchema, MixinDescriptor, ServiceDescriptor
from moleculer_call_wrapper.pipeline.writer import AtomicWriter

TEST_DATA_DIR = Path(__file__).with_name("test_data")
USERS_SERVICE = TEST_DATA_DIR / "services" / "users.service.ts"
POSTS_SERVICE = TEST_DATA_DIR / "services" / "posts.service.ts"


def hash_alias(specifier: str) -> str:
    return "s" + hashlib.sha1(specifier.encode("utf-8")).hexdigest()[:7]


def users_service() -> ServiceDescriptor:
    return ServiceDescriptor(
        name="users",
        version=2,
        actions={
            "get": ActionSchema(),
            "list": ActionSchema(),
            "ping": ActionSchema(),
            "notify": ActionSchema(),
            "pick": ActionSchema(),
            "latest": ActionSchema(),
            "secret": False,
            "purge": ActionSchema(visibility="private"),
        },
    )


def posts_service() -> ServiceDescriptor:
    return ServiceDescriptor(
        name="posts",
        actions={name: ActionSchema() for name in ["get", "find", "count", "create", "findStream", "publish"]},
        mixins=[MixinDescriptor(name="DatabaseMethodsMixin")],
    )


def expected_users_wrapper() -> str:
    common = hash_alias("@app/common")
    events = hash_alias("./types/events")
    user = hash_alias("./types/user")
    return (
        "/* eslint-disable @typescript-eslint/no-explicit-any,@typescript-eslint/no-unused-vars */\n"
        f"import type * as {common} from '@app/common';\n"
        "import type * as m from 'moleculer';\n"
        f"import type * as {events} from './types/events';\n"
        f"import type * as {user} from './types/user';\n"
        "\n"
        "interface Actions {\n"
        f"    'v2.users.get': [{user}.GetParams, {user}.User];\n"
        f"    'v2.users.list': [{common}.ListParams, {user}.User[]];\n"
        f"    'v2.users.notify': [{events}.NotifyParams, void];\n"
        "}\n"
        "interface ActionsU {\n"
        "    'v2.users.ping': string;\n"
        "}\n"
        "\n"
        f"export function call<T extends {user}.User>(ctx: m.Context, action: 'v2.users.latest', params?: undefined, meta?: m.CallingOptions): Promise<T>;\n"
        "export function call<N extends keyof Actions>(ctx: m.Context, action: N, params: Actions[N][0], meta?: m.CallingOptions): Promise<Actions[N][1]>;\n"
        "export function call<N extends keyof ActionsU>(ctx: m.Context, action: N, params?: undefined, meta?: m.CallingOptions): Promise<ActionsU[N]>;\n"
        "export function call(ctx: m.Context, action: string, params: unknown, meta?: m.CallingOptions): Promise<unknown> {\n"
        "    return ctx.call(action, params, meta);\n"
        "}\n"
        "\n"
        f"export function callT<K extends keyof {user}.User, N extends string = 'v2.users.pick'>(ctx: m.Context, action: N, "
        f"params: N extends 'v2.users.pick' ? {{ key: K }} : never, meta?: m.CallingOptions): Promise<{user}.User[K]>;\n"
        "export function callT(ctx: m.Context, action: string, params: unknown, meta?: m.CallingOptions): Promise<unknown> {\n"
        "    return ctx.call(action, params, meta);\n"
        "}\n"
    )


class TestGenerate:
    """Tests for the generated text."""

    def test_users_wrapper(self):
        generator = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service()], [USERS_SERVICE])
        assert generator.generate() == expected_users_wrapper()

    def test_generate_is_deterministic(self):
        generator = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service(), posts_service()], [USERS_SERVICE, POSTS_SERVICE])
        first = generator.generate()
        second = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service(), posts_service()], [USERS_SERVICE, POSTS_SERVICE]).generate()
        assert first == second
        assert generator.generate() == first

    def test_two_services(self):
        generator = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service(), posts_service()], [USERS_SERVICE, POSTS_SERVICE])
        text = generator.generate()

        post = hash_alias("./types/post")
        database = hash_alias("@treatwell/moleculer-essentials/mixins/database")
        assert f"import type * as {database} from '@treatwell/moleculer-essentials/mixins/database';\n" in text
        assert "import type * as stream from 'stream';\n" in text
        assert f"    'posts.get': [{{ id: string }}, {post}.Post];\n" in text
        assert f"    'posts.count': [{database}.DatabaseActionCountParams<{post}.Post, 'authorId'>, number];\n" in text
        assert f"    'posts.findStream': [{database}.DatabaseActionFindParams<{post}.Post, 'authorId'>, stream.Readable];\n" in text
        assert text.index("'posts.count'") < text.index("'v2.users.get'")

    def test_wrapper_location_changes_relative_imports(self):
        generator = CallWrapperGenerator(TEST_DATA_DIR / "generated" / "call.ts", [users_service()], [USERS_SERVICE])
        text = generator.generate()
        assert f"import type * as {hash_alias('../types/user')} from '../types/user';\n" in text

    def test_custom_lint_rules(self):
        config = GeneratorConfig(lint_rules=["max-len"])
        generator = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service()], [USERS_SERVICE], config=config)
        assert generator.generate().startswith("/* eslint-disable max-len */\n")

    def test_additional_builtins_run_after_defaults(self):
        calls = []

        def record(context, actions, service, definition):
            calls.append((service.name, [a.id for a in actions]))

        generator = CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service()], [USERS_SERVICE], [record])
        generator.generate()
        assert calls == [("users", ["v2.users.get", "v2.users.list", "v2.users.ping", "v2.users.notify", "v2.users.pick", "v2.users.latest"])]

    def test_mismatched_inputs(self):
        with pytest.raises(ValueError):
            CallWrapperGenerator(TEST_DATA_DIR / "call.ts", [users_service()], [])


class TestWrite:
    """Tests for the conditional write."""

    def copy_test_data(self, tmpdir: str) -> Path:
        root = Path(tmpdir) / "src"
        shutil.copytree(TEST_DATA_DIR, root)
        return root

    def test_write_then_no_rewrite(self, monkeypatch):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = self.copy_test_data(tmpdir)
            wrapper = root / "call.ts"
            services = [users_service()]
            paths = [root / "services" / "users.service.ts"]

            assert create_wrapper_call(wrapper, services, paths) is True
            assert wrapper.read_text(encoding="utf-8") == expected_users_wrapper()

            def fail(*args, **kwargs):
                raise AssertionError("unchanged wrapper must not be written")

            monkeypatch.setattr(AtomicWriter, "write", fail)
            assert create_wrapper_call(wrapper, services, paths) is False

    def test_changed_wrapper_is_rewritten(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = self.copy_test_data(tmpdir)
            wrapper = root / "call.ts"
            wrapper.write_text("// stale\n", encoding="utf-8")

            generator = CallWrapperGenerator(wrapper, [users_service()], [root / "services" / "users.service.ts"])
            assert not generator.is_up_to_date()
            assert generator.write() is True
            assert generator.is_up_to_date()

    def test_validated_write(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = self.copy_test_data(tmpdir)
            config = GeneratorConfig.from_dict({"output": {"validate_before_write": True}})
            generator = CallWrapperGenerator(root / "out" / "call.ts", [users_service()], [root / "services" / "users.service.ts"], config=config)

            assert generator.write() is True
            assert (root / "out" / "call.ts").exists()
