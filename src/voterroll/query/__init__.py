"""Query building blocks: field map, predicates, pagination, aggregation."""
