from ordering.api.routes import webhook_router

__all__ = ["webhook_router"]
