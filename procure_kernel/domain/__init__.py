"""Pure domain layer: value coercion, indent records and workflow types."""
