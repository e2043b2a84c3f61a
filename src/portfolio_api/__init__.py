"""
Portfolio API package.

Serves the timeline, career history and post feed of a personal portfolio
site from a pluggable record store (memory, SQLite or Supabase), and provides
the client-side pieces that consume it: cached list views (portfolio_api.sync)
and the admin session (portfolio_api.admin).

The ASGI application lives at portfolio_api.main:app; use
portfolio_api.main.create_app() to build one with explicit settings or store.
"""

__version__ = "0.1.0"
