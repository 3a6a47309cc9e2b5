"""Read, query and re-emit the generator's client-side search tables.

Examples
--------
>>> from doxsearch import load_text
>>> store = load_text(
...     "var searchData=\\n[\\n"
...     "  ['searchresult',['SearchResult',['../a.html',1,'mlclient']]]\\n"
...     "];"
... )
>>> [record.label for record in store.lookup("search")]
['SearchResult']
"""

from __future__ import annotations

from doxsearch.codec import dump_search_data, parse_search_data, parse_search_entries
from doxsearch.keys import decode_search_id, encode_search_id, normalize_key
from doxsearch.loader import bucket_files, load, load_directory, load_file, load_text
from doxsearch.records import Reference, SearchIndexRecord
from doxsearch.store import SearchIndexStore
from doxsearch_common.errors import IndexSourceError, MalformedIndexError

__all__ = [
    "IndexSourceError",
    "MalformedIndexError",
    "Reference",
    "SearchIndexRecord",
    "SearchIndexStore",
    "bucket_files",
    "decode_search_id",
    "dump_search_data",
    "encode_search_id",
    "load",
    "load_directory",
    "load_file",
    "load_text",
    "normalize_key",
    "parse_search_data",
    "parse_search_entries",
]
