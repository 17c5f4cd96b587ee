class DidacticException(Exception):
    def __init__(self, message=None):
        Exception.__init__(self)
        if isinstance(message, bytes):
            message = message.decode("utf-8", "replace")
        self.message = message

    def to_json(self):
        return {
            "type": self.__class__.__name__,
            "message": self.message,
        }

    def __str__(self):
        return str(self.message)

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.message)


class _PathError(DidacticException):
    def __init__(self, message, path=None):
        DidacticException.__init__(self, message)
        self.path = path

    def to_json(self):
        rv = DidacticException.to_json(self)
        rv["path"] = self.path and str(self.path)
        return rv

    def __str__(self):
        if self.path is None:
            return DidacticException.__str__(self)
        return "%s (path=%s)" % (DidacticException.__str__(self), self.path)


class MountError(_PathError):
    """A source directory could not be merged into the logical tree."""


class CompileError(_PathError):
    """A source document failed to compile."""

    def __init__(self, message, path=None, physical_path=None):
        _PathError.__init__(self, message, path)
        self.physical_path = physical_path

    def to_json(self):
        rv = _PathError.to_json(self)
        rv["physical_path"] = self.physical_path and str(self.physical_path)
        return rv

    def __str__(self):
        rv = _PathError.__str__(self)
        if self.physical_path is not None:
            rv = "%s [%s]" % (rv, self.physical_path)
        return rv


class CacheConsistencyError(_PathError):
    """The metadata walk and the render walk disagree about the set of
    compiled documents.  This is always a bug, never a content problem.
    """


class BuildError(DidacticException):
    pass
