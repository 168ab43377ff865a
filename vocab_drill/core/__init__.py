"""Domain logic independent of the web and database layers."""
