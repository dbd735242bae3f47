"""Handler layer for HTTP endpoints.

Handlers turn request DTOs into generation jobs, pick the transport
(event stream or buffered JSON) and map errors to status codes. They call
services only; stores and the model provider stay behind the service layer.
"""

from .recipe_handler import RecipeHandler

__all__ = [
    "RecipeHandler",
]
