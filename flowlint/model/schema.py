#flowlint/model/schema.py
# Decodable shape of an n8n-style workflow export. Only syntax lives here:
# missing ids, bad positions and unknown targets are reported by the checkers.

_TARGET = {
    "type": "object",
    "required": ["node"],
    "properties": {
        "node": {"type": "string"},
        # Connection type, usually "main"
        "type": {"type": "string"},
        # Input index on the target node
        "index": {
            "type": "integer",
            "minimum": 0
        }
    },
    "additionalProperties": True
}

WORKFLOW_SHAPE_SCHEMA = {
    "type": "object",
    "properties": {
        "nodes": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "properties": {
                    "id": {
                        "type": ["string", "number", "null"]
                    },
                    "name": {
                        "type": ["string", "null"]
                    },
                    "type": {
                        "type": ["string", "null"]
                    },

                    # Optional: parameters must be an object when present
                    "parameters": {
                        "type": ["object", "null"]
                    },

                    # Either {"credType": {"id": .., "name": ..}} or a legacy name-only string
                    "credentials": {
                        "type": ["object", "null"],
                        "additionalProperties": {
                            "type": ["object", "string", "null"]
                        }
                    },

                    "typeVersion": {
                        "type": ["integer", "number", "string", "null"]
                    },
                    "versionTag": {
                        "type": ["integer", "number", "string", "null"]
                    }
                    # position is deliberately absent: bad coordinates are a structural finding
                },
                "additionalProperties": True
            }
        },

        "connections": {
            "type": ["object", "null"],

            # Top-level keys: source node names or ids
            "additionalProperties": {
                "type": "object",

                # Inner keys: output port types (e.g., "main", "ai_tool")
                "additionalProperties": {
                    "type": "array",
                    "items": {

                        # Either:
                        #   (1) an output slot: [ {target}, {target}, ... ]
                        #   (2) a single target object: {target}
                        #   (3) null for an unused output slot
                        "anyOf": [
                            {
                                "type": "array",
                                "items": _TARGET
                            },
                            _TARGET,
                            {"type": "null"}
                        ]
                    }
                }
            }
        }
    },
    "additionalProperties": True
}
