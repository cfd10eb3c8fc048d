from valuation_client.server.app import app, create_app

__all__ = ["app", "create_app"]
