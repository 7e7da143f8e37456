"""Main entry point for running a demo Baton application."""

from dataclasses import dataclass, field

from baton import App, Context, Response, bind_body, bind_path, bind_query, ok
from baton.api.middleware import request_context, request_logging, security_headers
from baton.core.config import Settings, get_settings


@dataclass
class ItemPath:
    """Path variables of the item routes."""

    item_id: int = field(metadata={"path": "item_id"})


@dataclass
class ItemQuery:
    """Query parameters of the item lookup."""

    verbose: str = field(default="", metadata={"query": "verbose"})


@dataclass
class ItemBody:
    """JSON body accepted when creating an item."""

    name: str
    price: float


def create_app(settings: Settings | None = None) -> App:
    """Create the demo application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        App: Configured application instance.
    """
    if settings is None:
        settings = get_settings()

    app = App(settings=settings)
    app.use(security_headers())
    app.use(request_context)
    app.use(request_logging(settings.log_config))

    @app.get("/")
    def root(ctx: Context) -> Response:
        _ = ctx
        return ok({"message": f"Hello from {settings.app_name}!"})

    @app.get("/health")
    def health(ctx: Context) -> Response:
        _ = ctx
        return ok({"status": "healthy"})

    @app.get("/info")
    def info(ctx: Context) -> Response:
        _ = ctx
        return ok(
            {
                "app_name": settings.app_name,
                "version": settings.app_version,
                "environment": settings.environment,
                "debug": settings.debug,
            }
        )

    items = app.group()

    @items.get("/items/{item_id}")
    def get_item(ctx: Context) -> Response:
        path = bind_path(ctx, ItemPath)
        query = bind_query(ctx, ItemQuery)
        item: dict[str, object] = {"id": path.item_id}
        if query.verbose:
            item["correlation_id"] = ctx.get("correlation_id")
        return ok(item)

    @items.post("/items")
    def create_item(ctx: Context) -> Response:
        return ok(bind_body(ctx, ItemBody))

    return app


def main() -> None:
    """Main entry point for the demo application."""
    create_app().listen()


if __name__ == "__main__":
    main()
