from .new_era_backend import NewEraBackend
