"""Per-user task CRUD, pagination and bulk operations."""
