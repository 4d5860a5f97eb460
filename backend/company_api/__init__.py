"""Application package for the Company product and user API.

This package exposes the model, repository, service and controller
modules used by the FastAPI application. Each layer lives in its own
module; `tests/test_architecture.py` keeps the dependencies between them
pointing in one direction (controllers -> services -> repositories ->
models).
"""
