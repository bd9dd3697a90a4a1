"""Logbook Search Configuration - Python Example

Copy to your project root as logbook_search.py when settings need to be
computed. The CONFIG dict has the same structure as logbook_search.toml.
"""

import os

CONFIG = {
    "service": {
        "name": "Operations Logbook Search",
    },
    "elasticsearch": {
        # Comma separated list, e.g. "http://es1:9200,http://es2:9200"
        "hosts": os.environ.get("LOGBOOK_ES_HOSTS", "http://localhost:9200").split(","),
        "index": os.environ.get("LOGBOOK_ES_INDEX", "olog_logs"),
    },
    "search": {
        "default_size": 100,
        "max_size": 1000,
        "timestamp_field": "createdDate",
    },
}
