"""Schema Package - JSON Schema Loading.

Loads the JSON schemas used to validate data structures once at import
time and exposes them as module-level constants.

Available Schemas:
    CONFIG_SCHEMA: JSON Schema (Draft 7) for config.yml

Usage:
    from jsonschema import validate
    from schema import CONFIG_SCHEMA
    validate(instance=config, schema=CONFIG_SCHEMA)

Error Handling:
    A missing or malformed schema file fails the import with the path that
    was checked.
"""
from .schema import CONFIG_SCHEMA

__all__ = ["CONFIG_SCHEMA"]
