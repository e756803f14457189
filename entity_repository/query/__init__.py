"""Dynamic query construction: field resolution, coercion, operators, composition."""
