"""
Format rule definitions sub-package for fs-datasource.

Contains YAML files describing how each supported payload format is
recognised (content-type substrings, file extensions) and which parser
decodes it. The loader module (format_registry.py in the parent
package) reads these files at runtime.
"""
