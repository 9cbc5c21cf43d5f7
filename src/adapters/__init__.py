"""
adapters - Transport layers (FastAPI REST, Typer CLI) over the ServiceFactory.
"""
