"""Models package: ORM tables, DTOs and domain types."""
