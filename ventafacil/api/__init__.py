"""FastAPI backend (Remote Sale Service)."""
