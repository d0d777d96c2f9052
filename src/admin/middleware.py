"""WSGI middleware mapping product subdomains onto path prefixes.

With BASE_DOMAIN=example.com:

    admin.example.com/clients  ->  /admin/clients   (agency dashboard)
    app.example.com/my-shop    ->  /pos/my-shop     (point of sale)
    start.example.com/my-shop  ->  /start/my-shop   (customer start page)

The bare domain is not served by this application.
"""

import logging

logger = logging.getLogger(__name__)

SUBDOMAIN_PREFIXES = {
    "admin": "/admin",
    "app": "/pos",
    "start": "/start",
}

# Served on every host without a prefix
PASSTHROUGH_PREFIXES = ("/api/", "/static/", "/d/", "/login/", "/logout/", "/client/", "/health")

BARE_DOMAIN_MESSAGE = """This application runs on subdomains only:

- admin.{domain} - Agency Dashboard
- app.{domain} - POS System
- start.{domain} - Customer Onboarding
"""


def _host_without_port(environ) -> str:
    host = environ.get("HTTP_X_FORWARDED_HOST") or environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")
    # X-Forwarded-Host may carry a list, the first entry is the client-facing host
    host = host.split(",")[0].strip().lower()
    return host.rsplit(":", 1)[0] if ":" in host and not host.endswith("]") else host


def rewrite_path(path: str, prefix: str) -> str:
    """Prefix a request path unless it is already prefixed or passes through."""
    if path == prefix or path.startswith(prefix + "/"):
        return path
    if path.startswith(PASSTHROUGH_PREFIXES):
        return path
    return prefix if path in ("", "/") else prefix + path


class SubdomainRouter:
    """Rewrite PATH_INFO based on the request subdomain.

    Without a base domain, or for localhost, requests pass through untouched.
    """

    def __init__(self, app, base_domain: str | None = None):
        self.app = app
        self.base_domain = (base_domain or "").lower().rstrip(".") or None

    def __call__(self, environ, start_response):
        if not self.base_domain:
            return self.app(environ, start_response)

        host = _host_without_port(environ)
        if "localhost" in host:
            return self.app(environ, start_response)

        if host == self.base_domain:
            body = BARE_DOMAIN_MESSAGE.format(domain=self.base_domain).encode("utf-8")
            start_response(
                "404 Not Found",
                [("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", str(len(body)))],
            )
            return [body]

        suffix = "." + self.base_domain
        if host.endswith(suffix):
            subdomain = host[: -len(suffix)]
            prefix = SUBDOMAIN_PREFIXES.get(subdomain)
            if prefix:
                path_info = environ.get("PATH_INFO", "")
                new_path = rewrite_path(path_info, prefix)
                if new_path != path_info:
                    logger.debug(f"Subdomain rewrite {host}{path_info} -> {new_path}")
                    environ["PATH_INFO"] = new_path

        return self.app(environ, start_response)
