"""Drive addressing, provisioning and item operations."""
