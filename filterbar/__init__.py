"""filterbar: Kibana-style filter bar compiler for Elasticsearch bool queries."""

__version__ = "0.1.0"
