"""Command-line tools for running the ingestion pipelines without the web server."""
