"""Workflow orchestration module."""

# Note: Keep this package free of FastAPI/pydantic imports; workflow modules
# under it are loaded inside the Temporal workflow sandbox.
