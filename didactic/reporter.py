import time
import traceback
from contextlib import contextmanager

import click
from click import style
from werkzeug.local import LocalProxy
from werkzeug.local import LocalStack


_reporter_stack = LocalStack()


class Reporter:
    def __init__(self, env, verbosity=0):
        self.env = env
        self.verbosity = verbosity

        self.builder_stack = []
        self.source_stack = []

    def push(self):
        _reporter_stack.push(self)

    def pop(self):
        _reporter_stack.pop()

    def __enter__(self):
        self.push()
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.pop()

    @property
    def builder(self):
        if self.builder_stack:
            return self.builder_stack[-1]
        return None

    @property
    def current_source(self):
        if self.source_stack:
            return self.source_stack[-1]
        return None

    @property
    def show_build_info(self):
        return self.verbosity >= 1

    @property
    def show_tracebacks(self):
        return self.verbosity >= 1

    @property
    def show_sources(self):
        return self.verbosity >= 2

    @property
    def show_debug_info(self):
        return self.verbosity >= 3

    @contextmanager
    def build(self, activity, builder):
        now = time.time()
        self.builder_stack.append(builder)
        self.start_build(activity)
        try:
            yield
        finally:
            self.builder_stack.pop()
            self.finish_build(activity, now)

    def start_build(self, activity):
        pass

    def finish_build(self, activity, start_time):
        pass

    @contextmanager
    def process_source(self, source):
        now = time.time()
        self.source_stack.append(source)
        self.enter_source()
        try:
            yield
        finally:
            self.leave_source(now)
            self.source_stack.pop()

    def enter_source(self):
        pass

    def leave_source(self, start_time):
        pass

    def report_failure(self, source, exc_info):
        pass

    def report_build_all_failure(self, failures):
        pass

    def report_warning(self, message):
        pass

    def report_written(self, artifact):
        pass

    def report_debug_info(self, key, value):
        pass

    def report_generic(self, message):
        pass


class NullReporter(Reporter):
    pass


class BufferReporter(Reporter):
    def __init__(self, env, verbosity=0):
        Reporter.__init__(self, env, verbosity)
        self.buffer = []

    def clear(self):
        self.buffer = []

    def get_major_events(self):
        rv = []
        for event, data in self.buffer:
            if event != "debug-info":
                rv.append((event, data))
        return rv

    def get_failures(self):
        return [data for event, data in self.buffer if event == "failure"]

    def get_warnings(self):
        return [data["message"] for event, data in self.buffer if event == "warning"]

    def get_sources(self):
        return [data["source"] for event, data in self.buffer if event == "enter-source"]

    def get_written(self):
        return [data["artifact"] for event, data in self.buffer if event == "written"]

    def _emit(self, _event, **extra):
        self.buffer.append((_event, extra))

    def start_build(self, activity):
        self._emit("start-build", activity=activity)

    def finish_build(self, activity, start_time):
        self._emit("finish-build", activity=activity)

    def enter_source(self):
        self._emit("enter-source", source=self.current_source)

    def leave_source(self, start_time):
        self._emit("leave-source", source=self.current_source)

    def report_failure(self, source, exc_info):
        self._emit("failure", source=source, exc_info=exc_info)

    def report_build_all_failure(self, failures):
        self._emit("build-all-failure", failures=failures)

    def report_warning(self, message):
        self._emit("warning", message=message)

    def report_written(self, artifact):
        self._emit("written", artifact=artifact)

    def report_debug_info(self, key, value):
        self._emit("debug-info", key=key, value=value)

    def report_generic(self, message):
        self._emit("generic", message=message)


class CliReporter(Reporter):
    def __init__(self, env, verbosity=0):
        Reporter.__init__(self, env, verbosity)
        self.indentation = 0

    def indent(self):
        self.indentation += 1

    def outdent(self):
        self.indentation -= 1

    def _write_line(self, text):
        click.echo(" " * (self.indentation * 2) + text)

    def _write_kv_info(self, key, value):
        self._write_line("%s: %s" % (key, style(str(value), fg="yellow")))

    def start_build(self, activity):
        self._write_line(style("Started %s" % activity, fg="cyan"))
        if not self.show_build_info:
            return
        if self.env is not None:
            self._write_line(style("  Tree: %s" % self.env.root_path, fg="cyan"))
        if self.builder is not None:
            self._write_line(
                style("  Output path: %s" % self.builder.destination_path, fg="cyan")
            )

    def finish_build(self, activity, start_time):
        self._write_line(
            style(
                "Finished %s in %.2f sec" % (activity, time.time() - start_time),
                fg="cyan",
            )
        )

    def enter_source(self):
        if not self.show_sources:
            return
        self._write_line("%s %s" % (style("C", fg="cyan"), self.current_source))
        self.indent()

    def leave_source(self, start_time):
        if self.show_sources:
            self.outdent()

    def report_failure(self, source, exc_info):
        sign = style("E", fg="red")
        err = " ".join(
            "".join(traceback.format_exception_only(*exc_info[:2])).splitlines()
        ).strip()
        self._write_line("%s %s (%s)" % (sign, source or "build", err))

        if not self.show_tracebacks:
            return

        tb = traceback.format_exception(*exc_info)
        for line in "".join(tb).splitlines():
            if line.startswith("Traceback "):
                line = style(line, fg="red")
            elif line.startswith("  File "):
                line = style(line, fg="yellow")
            elif not line.startswith("    "):
                line = style(line, fg="red")
            self._write_line("  " + line)

    def report_build_all_failure(self, failures):
        self._write_line(
            style(
                "Error: Build failed with %s failure%s."
                % (failures, failures != 1 and "s" or ""),
                fg="red",
            )
        )

    def report_warning(self, message):
        self._write_line("%s %s" % (style("W", fg="yellow"), message))

    def report_written(self, artifact):
        self._write_line("%s %s" % (style("U", fg="green"), artifact))

    def report_debug_info(self, key, value):
        if self.show_debug_info:
            self._write_kv_info(key, value)

    def report_generic(self, message):
        self._write_line(style(str(message), fg="cyan"))


null_reporter = NullReporter(None)


@LocalProxy
def reporter():
    rv = _reporter_stack.top
    if rv is None:
        rv = null_reporter
    return rv
