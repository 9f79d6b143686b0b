"""End-to-end tests for the generation pipeline."""

from unittest.mock import patch

from swagger2api.config import build_config
from swagger2api.pipeline import generate


def _config(tmp_path, **overrides):
    return build_config({"input": "unused.json", "output": str(tmp_path / "api"), **overrides})


class TestGenerate:
    def test_report(self, tmp_path, admin_document):
        report = generate(_config(tmp_path), admin_document)
        assert report.title == "template-admin"
        assert report.operation_count == 4
        assert report.type_count == 11
        assert report.groups == {
            "authcontroller": 1,
            "usercontroller": 1,
            "menucontroller": 1,
            "rolecontroller": 1,
        }
        assert len(report.files) == 6
        assert report.formatted is None

    def test_loads_from_input(self, tmp_path, admin_document_file):
        config = build_config({"input": str(admin_document_file), "output": str(tmp_path / "out")})
        report = generate(config)
        assert (tmp_path / "out" / "usercontroller" / "index.ts").exists()
        assert report.operation_count == 4

    def test_diagnostics_collected(self, tmp_path):
        document = {
            "paths": {
                "/a": {
                    "get": {
                        "responses": {"200": {"schema": {"$ref": "#/definitions/Missing"}}},
                    }
                }
            },
            "definitions": {"Other": {"type": "string"}},
        }
        report = generate(_config(tmp_path), document)
        assert any("Missing" in note for note in report.diagnostics)

    def test_formatter_failure_is_reported(self, tmp_path, admin_document):
        with patch("swagger2api.pipeline.run_formatter", return_value=False) as formatter:
            report = generate(_config(tmp_path, lint="prettier --write"), admin_document)
        formatter.assert_called_once()
        assert report.formatted is False
        assert (tmp_path / "api" / "index.ts").exists()

    def test_flat_mode_has_no_groups(self, tmp_path, admin_document):
        report = generate(_config(tmp_path, groupByTags=False), admin_document)
        assert report.groups == {}
        assert (tmp_path / "api" / "api.ts").exists()

    def test_groups_count_each_operation_once_per_directory(self, tmp_path):
        document = {
            "paths": {
                "/users": {
                    "get": {"operationId": "listUsers", "tags": ["user admin", "user-admin"], "responses": {}},
                    "post": {"operationId": "createUser", "tags": ["user admin"], "responses": {}},
                }
            },
        }
        report = generate(_config(tmp_path), document)
        assert report.groups == {"user-admin": 2}
        assert (tmp_path / "api" / "user-admin" / "index.ts").exists()
