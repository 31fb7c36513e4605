"""
Storage backends sub-package for fs-datasource.

- base.py defines the FileSystem ABC, Response and DirectoryInfo.
- local.py, nginx.py, s3.py implement the built-in backends.
- unknown.py is the placeholder for unrecognised backend kinds.
- registry.py maps the ``type`` setting to a backend factory.
"""
