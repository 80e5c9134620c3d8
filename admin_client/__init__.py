"""
Admin client: backend collaborators for the listing engine.

- http.py: pooled httpx client with error mapping
- repositories.py: REST repositories for pedidos, productos, usuarios
- screens.py: static filter/statistics configuration per admin screen
- cli.py: command line front-end (typer + rich)
"""
