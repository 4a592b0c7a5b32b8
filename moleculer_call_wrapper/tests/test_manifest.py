"""
Tests for the generator configuration and manifest loading.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from moleculer_call_wrapper.pipeline.config import GeneratorConfig, OutputConfig, load_builtin, load_manifest
from moleculer_call_wrapper.pipeline.descriptors import ActionSchema
from moleculer_call_wrapper.pipeline.errors import ManifestError

TEST_DATA_DIR = Path(__file__).with_name("test_data")


def write_manifest(tmpdir: str, data) -> Path:
    path = Path(tmpdir) / "manifest.json"
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")
    return path


class TestGeneratorConfig:
    """Tests for GeneratorConfig."""

    def test_defaults(self):
        config = GeneratorConfig()
        assert config.lint_rules == ["@typescript-eslint/no-explicit-any", "@typescript-eslint/no-unused-vars"]
        assert config.output == OutputConfig(atomic_write=True, validate_before_write=False)

    def test_dict_roundtrip(self):
        config = GeneratorConfig.from_dict({"lint_rules": ["max-len"], "output": {"atomic_write": False}, "unknown": 1})
        assert config.lint_rules == ["max-len"]
        assert config.output.atomic_write is False
        assert GeneratorConfig.from_dict(config.to_dict()) == config

    def test_default_lint_rules_are_not_shared(self):
        config = GeneratorConfig()
        config.lint_rules.append("max-len")
        assert "max-len" not in GeneratorConfig().lint_rules


class TestLoadManifest:
    """Tests for load_manifest."""

    def test_fixture_manifest(self):
        manifest = load_manifest(TEST_DATA_DIR / "manifest.json")

        assert manifest.output == TEST_DATA_DIR.resolve() / "call.ts"
        assert manifest.definition_paths == [
            TEST_DATA_DIR.resolve() / "services" / "users.service.ts",
            TEST_DATA_DIR.resolve() / "services" / "posts.service.ts",
        ]

        users, posts = manifest.services
        # Discovered from the definition file
        assert users.name == "users"
        assert users.version == 2
        assert users.actions["secret"] is False
        assert users.actions["purge"] == ActionSchema(visibility="private")
        # Given in the manifest
        assert posts.name == "posts"
        assert posts.mixins[0].methods == ["_getDatabaseMixinCollection"]
        assert manifest.builtins == []

    def test_manifest_keys_win_over_discovery(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_manifest(
                tmpdir,
                {
                    "output": "call.ts",
                    "services": [{"file": str(TEST_DATA_DIR / "services" / "users.service.ts"), "version": 3}],
                },
            )
            service = load_manifest(path).services[0]
            assert service.name == "users"
            assert service.version == 3

    def test_options(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = write_manifest(
                tmpdir,
                {
                    "output": "out/call.ts",
                    "lint_rules": ["max-len"],
                    "output_options": {"validate_before_write": True},
                    "builtins": ["moleculer_call_wrapper.pipeline.builtins:inject_database_mixin_builtins"],
                },
            )
            manifest = load_manifest(path)

            assert manifest.output == Path(tmpdir).resolve() / "out" / "call.ts"
            assert manifest.config.lint_rules == ["max-len"]
            assert manifest.config.output.validate_before_write is True
            assert manifest.builtins[0].__name__ == "inject_database_mixin_builtins"

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ManifestError):
                load_manifest(write_manifest(tmpdir, "{not json"))

    def test_missing_manifest(self):
        with pytest.raises(ManifestError):
            load_manifest(TEST_DATA_DIR / "missing.json")

    def test_missing_output(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ManifestError, match="no output"):
                load_manifest(write_manifest(tmpdir, {"services": []}))

    def test_service_without_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ManifestError, match="no definition file"):
                load_manifest(write_manifest(tmpdir, {"output": "call.ts", "services": [{"name": "users"}]}))

    def test_undiscoverable_service(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "empty.ts").write_text("export {};\n", encoding="utf-8")
            with pytest.raises(ManifestError, match="No service schema"):
                load_manifest(write_manifest(tmpdir, {"output": "call.ts", "services": [{"file": "empty.ts"}]}))


class TestLoadBuiltin:
    """Tests for load_builtin."""

    def test_valid_path(self):
        builtin = load_builtin("moleculer_call_wrapper.pipeline.builtins.db_mixin:inject_database_mixin_builtins")
        assert callable(builtin)

    @pytest.mark.parametrize(
        "path",
        [
            "no_colon",
            "missing_module_xyz:builtin",
            "moleculer_call_wrapper.pipeline.builtins:missing",
            "moleculer_call_wrapper.pipeline.builtins.db_mixin:DATABASE_MIXIN_MODULE",
        ],
    )
    def test_invalid_paths(self, path):
        with pytest.raises(ManifestError):
            load_builtin(path)
