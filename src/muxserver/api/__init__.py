from .routes import Route, RouteEndpoint, Router, route_path

__all__ = ['Route', 'RouteEndpoint', 'Router', 'route_path']
