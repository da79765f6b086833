# fieldler/fieldler/ingest.py
from __future__ import annotations
import json
import logging
from typing import Any, Dict

log = logging.getLogger(__name__)

class JsonParser:
    """
    Parse a JSON document holding one record per schema type:
      { "<TypeName>": { "<key>": <value>, ... }, ... }
    Required behavior:
      - Every type declared in the schema must be present (types not in the schema are ignored).
      - Any field with {required: true} must exist in the record (its access key must be present).
      - Values may be null; a key missing from the record reads as null when compared.
    """

    def __init__(self, schema: Dict[str, Dict[str, Any]]):
        self.schema = schema

    def parse(self, json_path: str) -> Dict[str, Dict[str, Any]]:
        with open(json_path, "r", encoding="utf-8") as f:
            raw = json.load(f)

        if not isinstance(raw, dict):
            raise TypeError(f"{json_path}: top level must be an object, got {type(raw).__name__}")

        parsed: Dict[str, Dict[str, Any]] = {}
        for type_name, type_cfg in self.schema.items():
            if type_name not in raw:
                raise KeyError(f"Missing type: '{type_name}'")

            record = raw[type_name]
            if not isinstance(record, dict):
                raise TypeError(f"Record for '{type_name}' must be an object, got {type(record).__name__}")

            for fname, fdef in type_cfg["fields"].items():
                if fdef.get("required") and fdef["access"] not in record:
                    raise KeyError(f"Record for '{type_name}' missing required field '{fname}'")

            parsed[type_name] = dict(record)

        log.debug("%s: parsed %d record(s)", json_path, len(parsed))
        return parsed
