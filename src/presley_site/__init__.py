"""
Library package for presley-site.

This package holds the site implementation (form validation, cookies, page
rendering and the FastAPI application).

- Runtime package: `src/presley_site/`
- ASGI entrypoint: `api/index.py`
"""

__version__ = "1.0.0"
