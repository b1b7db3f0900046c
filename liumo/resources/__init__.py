"""Package data: the gzip-compressed corpus store (liumo.db.gz)."""
