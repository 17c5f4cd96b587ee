import hashlib
import os
import shutil
import subprocess

from didactic.exception import BuildError
from didactic.filemap import is_ignored_name
from didactic.reporter import reporter
from didactic.utils import locate_executable
from didactic.utils import portable_popen


# Source-only files that never end up in the output.
SOURCE_ONLY_EXTENSIONS = (".ini", ".toml", ".scss")


def _is_skipped(filename, skip_extensions):
    if is_ignored_name(filename):
        return True
    ext = os.path.splitext(filename)[1].lower()
    return ext in SOURCE_ONLY_EXTENSIONS or ext in skip_extensions


def copy_assets(src, dst, skip_extensions=()):
    """Recursively copies a directory of static files into the output."""
    os.makedirs(dst, exist_ok=True)
    with os.scandir(src) as it:
        entries = sorted(it, key=lambda x: x.name)
    for entry in entries:
        if is_ignored_name(entry.name):
            continue
        target = os.path.join(dst, entry.name)
        if entry.is_dir():
            copy_assets(entry.path, target, skip_extensions)
        elif not _is_skipped(entry.name, skip_extensions):
            shutil.copy2(entry.path, target)
            reporter.report_debug_info("copied asset", target)


def copy_mapped_assets(file_map, dst, skip_extensions=()):
    """Copies every non-document file of the logical tree to its logical
    location below ``dst``.
    """
    for logical in file_map:
        if _is_skipped(logical.name, skip_extensions):
            continue
        source = file_map.absolute(file_map.resolve(logical))
        target = os.path.join(dst, *logical.parts)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        shutil.copy2(source, target)
        reporter.report_debug_info("copied asset", logical)


def hash_file(filename):
    h = hashlib.md5()
    with open(filename, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def collect_asset_hashes(output_path, skip_extensions=(".html",)):
    """Maps the URL of every asset in the output folder to a content hash."""
    rv = {}
    for dirpath, dirnames, filenames in os.walk(output_path):
        dirnames.sort()
        for filename in sorted(filenames):
            if os.path.splitext(filename)[1].lower() in skip_extensions:
                continue
            full_path = os.path.join(dirpath, filename)
            rel = os.path.relpath(full_path, output_path)
            rv["/" + rel.replace(os.path.sep, "/")] = hash_file(full_path)
    return rv


def asset_url(url, asset_hashes):
    """Appends the content hash to an asset URL so browsers refetch it
    whenever it changes.
    """
    asset_hash = asset_hashes.get(url)
    if asset_hash is None:
        return url
    return "%s?v=%s" % (url, asset_hash)


def compile_stylesheet(source, destination, executable=None):
    """Compiles an SCSS file into CSS with the ``sass`` executable."""
    sass = locate_executable(executable or "sass")
    if sass is None:
        raise BuildError("Failed to locate sass to compile %s" % source)

    os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
    proc = portable_popen(
        [sass, "--no-source-map", source, destination],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    _, stderr = proc.communicate()

    if proc.returncode != 0:
        raise BuildError(
            "sass exited with code %d: %s"
            % (proc.returncode, stderr.decode("utf-8", "replace").strip())
        )
