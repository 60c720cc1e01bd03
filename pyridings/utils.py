"""
Exposes utility functions.

"""

from contextlib import contextmanager
import logging
import os
import tempfile
import timeit


_log = logging.getLogger("pyridings")


class EqualityMixin:

    def __eq__(self, other):
        if type(self) != type(other):
            return False

        for name in self.equality_attrs:
            if getattr(self, name) != getattr(other, name):
                return False

        return True

    def __ne__(self, other):
        return not self.__eq__(other)


def expand_paths(paths, suffix=".csv"):
    """
    Return a list of input file paths.

    Directories are replaced by the files directly inside them whose
    names end with the given suffix, in sorted order.

    """
    expanded = []
    for path in paths:
        if os.path.isdir(path):
            names = sorted(name for name in os.listdir(path) if name.lower().endswith(suffix))
            _log.info("found %d files in: %s" % (len(names), path))
            expanded.extend(os.path.join(path, name) for name in names)
        else:
            expanded.append(path)
    return expanded


@contextmanager
def replacing_path(path):
    """
    A context manager yielding a temporary path to write instead of path.

    The temporary file is moved over path only if the block succeeds, so
    a failed write never leaves a truncated file at path.

    """
    directory, name = os.path.split(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix=".%s." % name,
                                     suffix=os.path.splitext(name)[1])
    os.close(fd)
    try:
        yield temp_path
        os.replace(temp_path, path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)


@contextmanager
def time_it(task_desc):
    """
    A context manager for timing chunks of code and logging it.

    Arguments:
      task_desc: task description for logging purposes

    """
    start_time = timeit.default_timer()
    _log.info("begin: %s..." % task_desc)
    yield
    elapsed = timeit.default_timer() - start_time
    _log.info("elapsed (%s): %.4f seconds" % (task_desc, elapsed))
