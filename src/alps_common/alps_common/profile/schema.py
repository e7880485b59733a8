# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""JSON Schema for ALPS profiles in their JSON representation."""

from typing import Any, Dict

DESCRIPTOR_TYPES = ("semantic", "safe", "unsafe", "idempotent")

ALPS_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "ALPS profile",
    "type": "object",
    "required": ["alps"],
    "properties": {
        "$schema": {"type": "string"},
        "alps": {"$ref": "#/$defs/alps"},
    },
    "$defs": {
        "alps": {
            "type": "object",
            "properties": {
                "version": {"type": "string"},
                "title": {"type": "string"},
                "doc": {"$ref": "#/$defs/doc"},
                "link": {"$ref": "#/$defs/links"},
                "ext": {"$ref": "#/$defs/exts"},
                "descriptor": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/descriptor"},
                },
            },
        },
        "descriptor": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "pattern": r"^[A-Za-z_][\w.\-]*$"},
                "href": {"type": "string"},
                "title": {"type": "string"},
                "type": {"enum": list(DESCRIPTOR_TYPES)},
                "rt": {"type": "string"},
                "tag": {"type": "string"},
                "def": {"type": "string"},
                "rel": {"type": "string"},
                "doc": {"$ref": "#/$defs/doc"},
                "link": {"$ref": "#/$defs/links"},
                "ext": {"$ref": "#/$defs/exts"},
                "descriptor": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/descriptor"},
                },
            },
            "anyOf": [{"required": ["id"]}, {"required": ["href"]}],
        },
        "doc": {
            "oneOf": [
                {"type": "string"},
                {
                    "type": "object",
                    "properties": {
                        "href": {"type": "string"},
                        "format": {"enum": ["text", "html", "asciidoc", "markdown"]},
                        "value": {"type": "string"},
                        "contentType": {"type": "string"},
                    },
                },
            ]
        },
        "link": {
            "type": "object",
            "required": ["rel", "href"],
            "properties": {
                "rel": {"type": "string"},
                "href": {"type": "string"},
                "title": {"type": "string"},
                "tag": {"type": "string"},
            },
        },
        "links": {
            "oneOf": [
                {"$ref": "#/$defs/link"},
                {"type": "array", "items": {"$ref": "#/$defs/link"}},
            ]
        },
        "ext": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "string"},
                "href": {"type": "string"},
                "value": {"type": "string"},
                "tag": {"type": "string"},
            },
        },
        "exts": {
            "oneOf": [
                {"$ref": "#/$defs/ext"},
                {"type": "array", "items": {"$ref": "#/$defs/ext"}},
            ]
        },
    },
}
