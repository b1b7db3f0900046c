"""
Liumo Corpus Package.

Ships a Chinese poetry and prose corpus as a compressed SQLite store,
materializes it on startup and serves keyword and category search over
it through FTS5, with a Streamlit browsing interface.
"""

__version__ = "8.0.0"
