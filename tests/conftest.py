"""Shared fixtures: a small admin-backend OpenAPI 3 document.

Every operation answers with the ResOp envelope wrapping a payload type
(allOf [ResOp, {data: Payload}]), the pattern most NestJS backends emit.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest


def _envelope(payload: str) -> dict[str, Any]:
    return {
        "200": {
            "description": "",
            "content": {
                "application/json": {
                    "schema": {
                        "allOf": [
                            {"$ref": "#/components/schemas/ResOp"},
                            {"properties": {"data": {"$ref": f"#/components/schemas/{payload}"}}},
                        ]
                    }
                }
            },
        }
    }


def _json_body(name: str) -> dict[str, Any]:
    return {
        "required": True,
        "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{name}"}}},
    }


def make_admin_document() -> dict[str, Any]:
    return {
        "openapi": "3.0.0",
        "info": {"title": "template-admin", "description": "admin api", "version": "1.0"},
        "servers": [{"url": "http://localhost:7001"}],
        "tags": [{"name": "AuthController"}],
        "paths": {
            "/admin/auth/login": {
                "post": {
                    "operationId": "AuthController_login",
                    "summary": "Log in",
                    "tags": ["AuthController"],
                    "requestBody": _json_body("LoginDto"),
                    "responses": _envelope("LoginRespDto"),
                }
            },
            "/admin/system/user/list": {
                "post": {
                    "operationId": "UserController_list",
                    "summary": "List users",
                    "tags": ["UserController"],
                    "requestBody": _json_body("UserListDto"),
                    "responses": _envelope("UserListRespDto"),
                }
            },
            "/admin/system/menus/menuList": {
                "post": {
                    "operationId": "MenuController_menuList",
                    "summary": "Menu tree",
                    "tags": ["MenuController"],
                    "responses": _envelope("MenuListRespDto"),
                }
            },
            "/admin/system/role/list": {
                "post": {
                    "operationId": "RoleController_list",
                    "summary": "List roles",
                    "tags": ["RoleController"],
                    "requestBody": _json_body("RoleListDto"),
                    "responses": _envelope("RoleListResDto"),
                }
            },
        },
        "components": {
            "schemas": {
                "ResOp": {
                    "type": "object",
                    "properties": {
                        "data": {"type": "object"},
                        "code": {"type": "number", "default": 200},
                        "message": {"type": "string", "default": "success"},
                    },
                    "required": ["data", "code", "message"],
                },
                "LoginDto": {
                    "type": "object",
                    "properties": {
                        "username": {"type": "string", "description": "Account name"},
                        "password": {"type": "string"},
                    },
                    "required": ["username", "password"],
                },
                "LoginRespDto": {
                    "type": "object",
                    "properties": {"token": {"type": "string"}},
                    "required": ["token"],
                },
                "UserListDto": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "number"},
                        "pageSize": {"type": "number"},
                        "username": {"type": "string", "nullable": True},
                    },
                    "required": ["page", "pageSize"],
                },
                "UserItem": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "number"},
                        "username": {"type": "string"},
                        "status": {"$ref": "#/components/schemas/UserStatus"},
                    },
                    "required": ["id", "username"],
                },
                "UserStatus": {"type": "string", "enum": ["active", "disabled"]},
                "UserList": {"type": "array", "items": {"$ref": "#/components/schemas/UserItem"}},
                "UserListRespDto": {
                    "type": "object",
                    "properties": {
                        "list": {"$ref": "#/components/schemas/UserList"},
                        "total": {"type": "number"},
                    },
                    "required": ["list", "total"],
                },
                "MenuListRespDto": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "children": {
                            "type": "array",
                            "items": {"$ref": "#/components/schemas/MenuListRespDto"},
                        },
                    },
                    "required": ["name"],
                },
                "RoleListDto": {
                    "type": "object",
                    "properties": {"keyword": {"type": "string"}},
                },
                "RoleListResDto": {
                    "type": "object",
                    "properties": {
                        "roles": {"type": "array", "items": {"type": "string"}},
                    },
                    "required": ["roles"],
                },
            }
        },
    }


@pytest.fixture
def admin_document() -> dict[str, Any]:
    return make_admin_document()


@pytest.fixture
def admin_document_file(tmp_path: Path) -> Path:
    path = tmp_path / "openapi.json"
    path.write_text(json.dumps(make_admin_document()), encoding="utf-8")
    return path
