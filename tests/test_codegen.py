"""Tests for rendering and writing generated output."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from swagger2api.codegen import render_artifacts, run_formatter, write_artifacts
from swagger2api.config import build_config
from swagger2api.operations import parse_operations
from swagger2api.type_catalog import build_type_catalog


def _config(**overrides):
    return build_config({"input": "spec.json", "output": "out", **overrides})


def _render(document, **overrides):
    config = _config(**overrides)
    return render_artifacts(parse_operations(document, config), build_type_catalog(document), config)


class TestGroupedTypeScript:
    """Default mode: one unit per tag, types file and barrel."""

    def test_layout(self, admin_document):
        artifacts = _render(admin_document)
        assert sorted(artifacts) == [
            "authcontroller/index.ts",
            "index.ts",
            "menucontroller/index.ts",
            "rolecontroller/index.ts",
            "types.ts",
            "usercontroller/index.ts",
        ]

    def test_import_template_first_line(self, admin_document):
        unit = _render(admin_document)["authcontroller/index.ts"]
        assert unit.splitlines()[0] == "import { request } from '@/utils/request';"

    def test_selective_type_imports(self, admin_document):
        artifacts = _render(admin_document)
        assert "import type { LoginDto, LoginRespDto, ResOp } from '../types';" in artifacts["authcontroller/index.ts"]
        assert "import type { MenuListRespDto, ResOp } from '../types';" in artifacts["menucontroller/index.ts"]

    def test_function(self, admin_document):
        unit = _render(admin_document)["authcontroller/index.ts"]
        assert "export const authControllerLoginPost = (data: LoginDto, config?: any) => {" in unit
        assert "  return request<ResOp<LoginRespDto>>({\n" in unit
        assert "    url: '/admin/auth/login',\n    method: 'POST',\n    data,\n    ...config\n  });" in unit

    def test_comment_block(self, admin_document):
        unit = _render(admin_document)["authcontroller/index.ts"]
        assert "/**\n * Log in\n *\n * @param data request body\n" in unit

    def test_no_body_operation(self, admin_document):
        unit = _render(admin_document)["menucontroller/index.ts"]
        assert "export const menuControllerMenuListPost = (config?: any) => {" in unit
        assert "    data," not in unit

    def test_barrel(self, admin_document):
        barrel = _render(admin_document)["index.ts"]
        exports = [line for line in barrel.splitlines() if line.startswith("export")]
        assert exports == [
            "export * from './types';",
            "export * from './authcontroller';",
            "export * from './usercontroller';",
            "export * from './menucontroller';",
            "export * from './rolecontroller';",
        ]

    def test_types_file(self, admin_document):
        types = _render(admin_document)["types.ts"]
        assert "export interface LoginDto {" in types
        assert "export type UserList = UserItem;" in types
        assert "  list: UserList[];" in types
        assert "[][]" not in types

    def test_kebab_directories(self, admin_document):
        artifacts = _render(admin_document, tagGrouping={"fileNaming": "kebab-case"})
        assert "auth-controller/index.ts" in artifacts

    def test_camel_directories(self, admin_document):
        artifacts = _render(admin_document, tagGrouping={"fileNaming": "camelCase"})
        assert "authController/index.ts" in artifacts
        assert "export * from './authController';" in artifacts["index.ts"]


class TestOtherModes:
    def test_flat(self, admin_document):
        artifacts = _render(admin_document, groupByTags=False)
        assert sorted(artifacts) == ["api.ts", "index.ts", "types.ts"]
        assert "from './types';" in artifacts["api.ts"]
        assert "export * from './api';" in artifacts["index.ts"]

    def test_javascript(self, admin_document):
        artifacts = _render(admin_document, generator="javascript", requestStyle="method")
        assert "types.ts" not in artifacts
        unit = artifacts["authcontroller/index.js"]
        assert "import type" not in unit
        assert "export const authControllerLoginPost = (data, config) => {" in unit
        assert "  return request({" in unit
        assert "    method: 'POST'," in unit
        assert "./types" not in artifacts["index.js"]

    def test_method_style(self, admin_document):
        unit = _render(admin_document, requestStyle="method")["authcontroller/index.ts"]
        assert "  return request.post<ResOp<LoginRespDto>>({" in unit
        assert "method: 'POST'" not in unit

    def test_prefix(self, admin_document):
        unit = _render(admin_document, prefix="/api")["authcontroller/index.ts"]
        assert "url: '/api/admin/auth/login'" in unit

    def test_toggles(self, admin_document):
        artifacts = _render(admin_document, options={"generateModels": False, "generateIndex": False})
        assert "types.ts" not in artifacts
        assert "index.ts" not in artifacts
        assert "import type" not in artifacts["authcontroller/index.ts"]

    def test_untagged_operations_go_to_default(self):
        document = {"paths": {"/ping": {"get": {"responses": {}}}}}
        artifacts = _render(document)
        assert "export const pingGet = (config?: any) => {" in artifacts["default/index.ts"]

    def test_tags_sharing_a_directory_are_merged(self):
        document = {
            "paths": {
                "/a": {"get": {"tags": ["user admin"], "responses": {}}},
                "/b": {"get": {"tags": ["user-admin"], "responses": {}}},
            }
        }
        unit = _render(document)["user-admin/index.ts"]
        assert "aGet" in unit
        assert "bGet" in unit


class TestWriteArtifacts:
    def test_writes_tree(self, tmp_path):
        output = tmp_path / "api"
        written = write_artifacts({"index.ts": "a", "user/index.ts": "b"}, output)
        assert (output / "user" / "index.ts").read_text() == "b"
        assert len(written) == 2

    def test_overwrite_replaces_directory(self, tmp_path):
        output = tmp_path / "api"
        output.mkdir()
        (output / "stale.ts").write_text("old")
        write_artifacts({"index.ts": "new"}, output, overwrite=True)
        assert not (output / "stale.ts").exists()
        assert (output / "index.ts").read_text() == "new"

    def test_without_overwrite_keeps_other_files(self, tmp_path):
        output = tmp_path / "api"
        output.mkdir()
        (output / "custom.ts").write_text("mine")
        write_artifacts({"index.ts": "new"}, output, overwrite=False)
        assert (output / "custom.ts").read_text() == "mine"
        assert (output / "index.ts").read_text() == "new"

    def test_no_staging_left_behind(self, tmp_path):
        output = tmp_path / "api"
        write_artifacts({"index.ts": "x"}, output)
        write_artifacts({"index.ts": "y"}, output)
        assert [p.name for p in tmp_path.iterdir()] == ["api"]

    def test_failed_write_keeps_previous_output(self, tmp_path):
        output = tmp_path / "api"
        output.mkdir()
        (output / "index.ts").write_text("previous")
        with patch("swagger2api.codegen.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_artifacts({"index.ts": "next"}, output)
        assert (output / "index.ts").read_text() == "previous"


class TestRunFormatter:
    def test_success(self, tmp_path):
        with patch("swagger2api.codegen.subprocess.run") as run:
            assert run_formatter("prettier --write", tmp_path) is True
        assert run.call_args.args[0] == ["prettier", "--write", str(tmp_path)]

    def test_missing_command(self, tmp_path):
        with patch("swagger2api.codegen.subprocess.run", side_effect=FileNotFoundError("prettier")):
            assert run_formatter("prettier --write", tmp_path) is False

    def test_failing_command(self, tmp_path):
        error = subprocess.CalledProcessError(2, ["prettier"])
        with patch("swagger2api.codegen.subprocess.run", side_effect=error):
            assert run_formatter("prettier --write", tmp_path) is False
