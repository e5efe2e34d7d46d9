"""Flask application class carrying the service container."""

from flask import Flask

from stock_ledger.services.container import ServiceContainer


class App(Flask):
    """Flask application with the dependency injection container attached."""

    container: ServiceContainer
