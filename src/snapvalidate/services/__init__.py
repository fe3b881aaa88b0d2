"""Service layer: the rule engine, schema orchestration, and prebuilt validators."""
