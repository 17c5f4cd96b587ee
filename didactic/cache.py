from didactic.exception import CacheConsistencyError
from didactic.filemap import LogicalPath


class CompiledDocumentCache:
    """Hands compiled documents from the metadata walk over to the render
    walk.  Every logical path is put exactly once and taken exactly once.
    """

    def __init__(self):
        self._documents = {}

    def __len__(self):
        return len(self._documents)

    def __contains__(self, logical):
        return LogicalPath.parse(logical) in self._documents

    def put(self, logical, document):
        logical = LogicalPath.parse(logical)
        if logical in self._documents:
            raise CacheConsistencyError("Document was compiled twice", logical)
        self._documents[logical] = document

    def take(self, logical):
        """Removes and returns the compiled document for ``logical``."""
        logical = LogicalPath.parse(logical)
        try:
            return self._documents.pop(logical)
        except KeyError:
            raise CacheConsistencyError(
                "No compiled document in the cache", logical
            ) from None

    def pending(self):
        return sorted(self._documents)

    def ensure_drained(self):
        pending = self.pending()
        if pending:
            raise CacheConsistencyError(
                "Compiled documents were never rendered: %s"
                % ", ".join(str(x) for x in pending)
            )
